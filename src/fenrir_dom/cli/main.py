"""Command-line entry point for fenrir-dom.

Reads a saved response, body or HTML file (or stdin) and prints the
resulting tree either as an indented listing or as JSON.
"""

import argparse
import json
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from fenrir_dom import __version__
from fenrir_dom.api import FenrirParser, ParseResult
from fenrir_dom.shared import (
    ConfigError,
    DuplicateAttributePolicy,
    EndTagPolicy,
    FenrirError,
    ParserConfig,
    configure_logging,
    get_logger,
)
from fenrir_dom.tree import Node, NodeKind

INPUT_MODES = ("html", "chunked", "response")
OUTPUT_FORMATS = ("tree", "json")
INDENT = "  "


class CLIConfig:
    """Configuration management for CLI operations."""

    def __init__(self) -> None:
        self.parser_config = ParserConfig.default()
        self.input_mode = "html"
        self.output_format = "tree"
        self.include_unknown = True
        self.verbose = False
        self.quiet = False

    @classmethod
    def from_file(cls, config_path: Path) -> "CLIConfig":
        """Load the parser configuration from a JSON file.

        The file holds a ``ParserConfig.to_dict()`` document, optionally with
        ``input_mode`` and ``output_format`` keys for the CLI itself.

        Raises:
            ConfigError: If the file cannot be read or holds invalid settings.
        """
        config = cls()
        try:
            data = json.loads(config_path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            raise ConfigError(f"Could not load config file {config_path}: {e}") from e
        if not isinstance(data, dict):
            raise ConfigError(f"Config file {config_path} must hold a JSON object")

        config.parser_config = ParserConfig.from_dict(data)
        config.input_mode = data.get("input_mode", config.input_mode)
        config.output_format = data.get("output_format", config.output_format)
        if config.input_mode not in INPUT_MODES:
            raise ConfigError(f"input_mode must be one of {list(INPUT_MODES)}")
        if config.output_format not in OUTPUT_FORMATS:
            raise ConfigError(f"output_format must be one of {list(OUTPUT_FORMATS)}")
        return config


def format_tree(root: Node, include_unknown: bool = True) -> str:
    """Render a tree as an indented listing.

    Each element is shown as ``(n) tag: text`` where ``n`` is its child
    count. The root itself is not printed and its children sit at the left
    margin; root text, if any, is printed first. With ``include_unknown``
    off, elements of kind UNKNOWN are skipped and their children take their
    place at the same depth.

    No "Children:" header line is printed between an element and its
    children; nesting is carried by indentation alone.
    """
    lines: List[str] = []
    if root.text:
        lines.append(f"#text: {root.text}")

    stack = [(child, 0) for child in reversed(root.children)]
    while stack:
        node, depth = stack.pop()
        if node.kind is NodeKind.UNKNOWN and not include_unknown:
            stack.extend((child, depth) for child in reversed(node.children))
            continue
        label = f"({len(node.children)}) {node.tag_name}"
        if node.text is not None:
            label += f": {node.text}"
        lines.append(INDENT * depth + label)
        stack.extend((child, depth + 1) for child in reversed(node.children))
    return "\n".join(lines)


def format_result(
    result: ParseResult,
    format_type: str,
    include_unknown: bool = True
) -> str:
    """Format a parse result for output."""
    if format_type == "json":
        payload: Dict[str, Any] = {
            "summary": result.summary(),
            "tree": result.document.to_dict(),
            "diagnostics": [entry.to_dict() for entry in result.diagnostics],
        }
        return json.dumps(payload, indent=2)
    return format_tree(result.root, include_unknown)


def create_argument_parser() -> argparse.ArgumentParser:
    """Create the main argument parser."""
    parser = argparse.ArgumentParser(
        prog="fenrir-dom",
        description="Build a simplified DOM tree from an HTTP response body",
    )
    parser.add_argument("--version", action="version", version=__version__)
    parser.add_argument(
        "input",
        help="File to read, or '-' for standard input",
    )

    mode = parser.add_mutually_exclusive_group()
    mode.add_argument(
        "--chunked",
        dest="input_mode",
        action="store_const",
        const="chunked",
        help="Input is a chunked transfer-encoded body",
    )
    mode.add_argument(
        "--response",
        dest="input_mode",
        action="store_const",
        const="response",
        help="Input is a complete HTTP response including headers",
    )

    parser.add_argument(
        "--format", "-f",
        choices=OUTPUT_FORMATS,
        default=None,
        help="Output format (default: tree)",
    )
    parser.add_argument(
        "--known-only",
        action="store_true",
        help="In tree output, list only h1, p, div and a elements",
    )
    parser.add_argument(
        "--duplicate-attributes",
        choices=["keep-all", "first-wins", "last-wins"],
        default=None,
        help="How repeated attribute names are resolved (default: keep-all)",
    )
    parser.add_argument(
        "--strict-end-tags",
        action="store_true",
        help="Close the nearest open element with a matching name "
             "instead of whatever is open",
    )
    parser.add_argument(
        "--encoding",
        default=None,
        help="Character encoding of the HTML (default: utf-8)",
    )
    parser.add_argument(
        "--config", "-c",
        type=Path,
        help="JSON configuration file",
    )

    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument("--verbose", "-v", action="store_true", help="Debug logging")
    verbosity.add_argument("--quiet", "-q", action="store_true", help="Errors only")
    return parser


def build_cli_config(args: argparse.Namespace) -> CLIConfig:
    """Merge the optional config file with command-line flags."""
    config = CLIConfig.from_file(args.config) if args.config else CLIConfig()

    if args.input_mode:
        config.input_mode = args.input_mode
    if args.format:
        config.output_format = args.format
    if args.known_only:
        config.include_unknown = False
    config.verbose = args.verbose
    config.quiet = args.quiet

    overrides: Dict[str, Any] = {}
    if args.duplicate_attributes:
        policy_name = args.duplicate_attributes.replace("-", "_").upper()
        overrides["lexer__duplicate_attributes"] = DuplicateAttributePolicy[policy_name]
    if args.strict_end_tags:
        overrides["tree__end_tag_policy"] = EndTagPolicy.STRICT
    if args.encoding:
        overrides["lexer__encoding"] = args.encoding
    if overrides:
        config.parser_config = config.parser_config.override(**overrides)
    return config


def read_input(source: str) -> bytes:
    if source == "-":
        return sys.stdin.buffer.read()
    return Path(source).read_bytes()


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    parser = create_argument_parser()
    args = parser.parse_args(argv)

    try:
        config = build_cli_config(args)
    except ConfigError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if config.verbose:
        configure_logging("DEBUG")
    elif config.quiet:
        configure_logging("ERROR")
    else:
        configure_logging(config.parser_config.global_.logging_level)
    logger = get_logger(__name__, None, "cli")

    try:
        data = read_input(args.input)
    except OSError as e:
        print(f"Error: cannot read {args.input}: {e}", file=sys.stderr)
        return 1

    fenrir = FenrirParser(config.parser_config)
    try:
        if config.input_mode == "response":
            result = fenrir.parse_response(data)
        elif config.input_mode == "chunked":
            result = fenrir.parse_body(data, chunked=True)
        else:
            result = fenrir.parse_html(data)
    except FenrirError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    logger.debug("Formatting output", extra={"format": config.output_format})
    print(format_result(result, config.output_format, config.include_unknown))
    return 0


if __name__ == "__main__":
    sys.exit(main())

"""Test module for fenrir_dom package initialization."""


def test_package_import() -> None:
    """Test that the package can be imported successfully."""
    import fenrir_dom

    assert fenrir_dom is not None


def test_package_has_version() -> None:
    """Test that the package has a version attribute."""
    import fenrir_dom

    assert isinstance(fenrir_dom.__version__, str)
    assert fenrir_dom.__version__ == "0.1.0"


def test_package_exports_pipeline_entry_points() -> None:
    """Test that the top-level package re-exports the pipeline functions."""
    import fenrir_dom

    for name in ("parse_html", "parse_body", "parse_response", "FenrirParser"):
        assert name in fenrir_dom.__all__
        assert callable(getattr(fenrir_dom, name))


def test_package_exports_error_types() -> None:
    """Test that error types share the FenrirError base."""
    import fenrir_dom

    assert issubclass(fenrir_dom.DecodeError, fenrir_dom.FenrirError)
    assert issubclass(fenrir_dom.LexError, fenrir_dom.FenrirError)

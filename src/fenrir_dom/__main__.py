import sys

from fenrir_dom.cli import main

sys.exit(main())

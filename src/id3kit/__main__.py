"""Entry point for ``python -m id3kit``."""

import sys

from id3kit.cli import main

if __name__ == "__main__":
    sys.exit(main())

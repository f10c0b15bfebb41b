"""Allow running as ``python -m downrelease``."""

import sys

from downrelease.main import main

if __name__ == "__main__":
    sys.exit(main())

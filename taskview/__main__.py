"""Entry point for taskview when run as a module.

This allows the package to be run with: python -m taskview
"""

import sys

from taskview.cli import main

if __name__ == "__main__":
    sys.exit(main())

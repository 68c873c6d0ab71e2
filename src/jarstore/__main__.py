#!/usr/bin/env python3
"""jarstore - Module entry point."""
import sys

from jarstore.cli import main

if __name__ == "__main__":
    sys.exit(main())

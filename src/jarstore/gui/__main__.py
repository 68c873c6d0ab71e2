#!/usr/bin/env python3
"""Module entry point for the store window."""

import sys
from jarstore.gui.app import main

if __name__ == "__main__":
    sys.exit(main())

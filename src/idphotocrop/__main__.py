#!/usr/bin/env python3
"""
IdPhotoCrop - Entry point for python -m idphotocrop

This module allows the package to be run as a module:
    python -m idphotocrop extract scan.pdf -o photo.png
"""

import sys

from idphotocrop.cli import main

if __name__ == "__main__":
    sys.exit(main())

"""
Main entry point for EEG Monitor package

This allows running the package with: python -m eeg_monitor
"""

import sys

from .cli.main import main

if __name__ == "__main__":
    sys.exit(main())

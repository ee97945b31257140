"""
Entry point for module execution (``python -m ember_migrator``).

This module delegates execution to the CLI handler in ``ember_migrator.cli.__main__``.
"""

import sys
from ember_migrator.cli.__main__ import main

if __name__ == "__main__":
  sys.exit(main())

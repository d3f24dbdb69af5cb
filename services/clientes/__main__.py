"""
Entry point for running the customer service as a module.

Usage:
    python -m services.clientes <command> [args]
"""

import sys

from .main import main

if __name__ == "__main__":
    sys.exit(main())

"""
KeyForge Entry Point
=====================

Allows running the KeyForge CLI via: python -m keyforge
"""

from keyforge.cli import main

if __name__ == "__main__":
    main()

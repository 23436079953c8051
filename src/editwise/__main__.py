"""
Main entry point for editwise when run as a module.

Allows execution via: python -m editwise

editwise/src/editwise/__main__.py
"""

from .cli import main

if __name__ == "__main__":
    main()

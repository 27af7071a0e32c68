#!/usr/bin/env python3
"""
sjfsched entry point.

Allows running: python -m sjfsched
"""

from sjfsched.cli import main

if __name__ == "__main__":
    main()

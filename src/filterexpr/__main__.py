"""Entry point for 'python -m filterexpr' command.

This module allows the filterexpr CLI to be invoked using
'python -m filterexpr serialize ...' or 'python -m filterexpr evaluate ...'.
"""

from filterexpr.cli import main

if __name__ == "__main__":
    main()

"""
Raszagal CLI Entry Point

Allows running the package as a module: python -m raszagal
"""

from raszagal.cli import main

if __name__ == "__main__":
    main()

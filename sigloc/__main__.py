"""Command line entry point: python -m sigloc"""

from sigloc.main import main

if __name__ == "__main__":
    main()

import sys

from .grus import main

if __name__ == "__main__":
    sys.exit(main())

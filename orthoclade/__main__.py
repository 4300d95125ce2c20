import sys

from orthoclade.cli import main

if __name__ == "__main__":
    sys.exit(main())

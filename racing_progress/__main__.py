import sys

from racing_progress.cli import main

if __name__ == "__main__":
    sys.exit(main())

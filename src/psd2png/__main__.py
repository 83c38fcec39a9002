import sys

from psd2png.cli import main

if __name__ == "__main__":
    sys.exit(main())

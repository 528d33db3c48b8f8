"""Entry point for launching the shooting range controller shell."""

import sys
from shooting_range.cli import main


if __name__ == "__main__":
    sys.exit(main())

"""Allow running tablestate as ``python -m tablestate``."""

import sys

from .cli import main


if __name__ == "__main__":
    sys.exit(main())

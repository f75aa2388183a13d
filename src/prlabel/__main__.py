"""Allow running prlabel as ``python -m prlabel``."""

import sys

from prlabel.cli import main

if __name__ == "__main__":
	sys.exit(main())

"""Allow running the command line with ``python -m pyheatzy``."""

import sys

from pyheatzy.cli import main


sys.exit(main())

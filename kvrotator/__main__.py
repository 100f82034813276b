"""Allow `python -m kvrotator`."""

import sys

from kvrotator.cli import main

sys.exit(main())

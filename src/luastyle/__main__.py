"""Allow `python -m luastyle`."""

import sys

from luastyle.cli import main

sys.exit(main())

"""Allow `python -m globdispatch`."""

import sys

from globdispatch.cli import main

sys.exit(main())

"""Allow `python -m bce`."""

import sys

from bce.interfaces.cli.main import main

sys.exit(main())

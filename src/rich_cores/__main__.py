"""Allow running as ``python -m rich_cores``."""

import sys

from .cli import main

sys.exit(main())

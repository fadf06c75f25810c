"""Entry point for ``python -m mapper``."""

import sys

from .cli import main

sys.exit(main())

"""Allow running b2proxy as a module: python -m b2proxy."""

import sys

from b2proxy.cli import main

sys.exit(main())

"""Allow running as ``python -m settree``."""

import sys

from settree.bootstrap.entrypoints import cli_main

sys.exit(cli_main())

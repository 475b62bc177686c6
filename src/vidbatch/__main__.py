"""Allow ``python -m vidbatch``."""

import sys

from .app import main

sys.exit(main())

"""Allow ``python -m sjavac``."""

import sys

from sjavac.main import main

if __name__ == "__main__":
    sys.exit(main())

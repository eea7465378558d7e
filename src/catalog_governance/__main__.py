"""Allow ``python -m catalog_governance``."""

import sys

from catalog_governance.cli.main import main

if __name__ == "__main__":
    sys.exit(main())

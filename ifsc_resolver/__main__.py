"""Entry point for ``python -m ifsc_resolver``"""

import sys

from ifsc_resolver.cli import main


if __name__ == "__main__":
    sys.exit(main())

"""Allow running the CLI as a module: python -m msikvm"""

import sys

from .cli import main

if __name__ == "__main__":
    sys.exit(main())

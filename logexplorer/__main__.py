"""Module entrypoint for ``python -m logexplorer``.

All argument parsing and runtime setup happen in ``logexplorer.cli``.
"""

import sys

from .cli import main


if __name__ == "__main__":
    sys.exit(main())

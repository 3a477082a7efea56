"""
Allows running the server with ``python -m farm_server``.
"""

import sys

from farm_server.main import main


if __name__ == "__main__":
    sys.exit(main())

"""Entry point: python -m bakemcp <openapi-input> [-o DIR] [-f]

Reads an OpenAPI 3.x document, writes package.json and index.js.
"""

from __future__ import annotations

import sys

from .cli import main

if __name__ == "__main__":
    sys.exit(main())

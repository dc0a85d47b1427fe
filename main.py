#!/usr/bin/env python3
"""PT Timer entry point.

Run with:
    python main.py run
    python -m pttimer run
"""

import sys

from pttimer.__main__ import main


if __name__ == "__main__":
    sys.exit(main())

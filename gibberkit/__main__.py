#!/usr/bin/env python3
"""Allow `python -m gibberkit`."""

import sys

from gibberkit.cli import main

sys.exit(main())

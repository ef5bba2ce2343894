"""Run the file manager with `python -m filemanager`."""

import sys

from .terminal import main

sys.exit(main())

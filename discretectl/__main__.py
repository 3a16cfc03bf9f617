from __future__ import annotations

import sys

from discretectl.cli import main

sys.exit(main())

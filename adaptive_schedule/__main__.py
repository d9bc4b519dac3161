"""Allow running as `python -m adaptive_schedule`."""

import sys

from adaptive_schedule.cli import main

sys.exit(main())

"""Allow ``python -m kb_ingest``."""

import sys

from kb_ingest.cli import main

sys.exit(main())

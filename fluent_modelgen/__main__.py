"""Allow ``python -m fluent_modelgen``."""

from __future__ import annotations

import sys

from fluent_modelgen.cli import main

sys.exit(main())

"""Root conftest: keeps the test run off any database a local .env names."""
from __future__ import annotations

import os

os.environ.setdefault("DATABASE_URL", "")

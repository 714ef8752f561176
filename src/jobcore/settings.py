from __future__ import annotations
import os

from .env import parse_bool

OWNER = os.environ.get("JOBCORE_OWNER", "engine")
DEBUG = parse_bool(os.environ.get("JOBCORE_DEBUG", ""))
HANDLERS_FILE = os.environ.get("JOBCORE_HANDLERS", "jobcore_handlers.py")

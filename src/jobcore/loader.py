# loader.py
from __future__ import annotations

import runpy
from collections.abc import Mapping
from pathlib import Path
from typing import Callable, Dict, Optional

from .model import Handler


# ----------------------------------------------------------------------
# Handler loading (local file)
# ----------------------------------------------------------------------

def load_handlers(path: str | Path) -> Dict[str, Handler]:
    """
    Load job handlers from a python file path.

    The file must define either:
      - handlers() -> Mapping[str, Callable[[Job], str]]
      - HANDLERS = {"name": fn, ...}

    Returns:
      Dict[str, Handler]
    """
    handlers_path = Path(path).expanduser().resolve()
    if not handlers_path.exists():
        raise FileNotFoundError(f"Handlers file not found: {handlers_path}")
    if handlers_path.suffix != ".py":
        raise ValueError(f"Handlers must be a .py file, got: {handlers_path.name}")

    module_name = f"jobcore_handlers_{handlers_path.stem}"
    globals_dict = runpy.run_path(str(handlers_path), run_name=module_name)

    table = None
    if "handlers" in globals_dict and callable(globals_dict["handlers"]):
        table = globals_dict["handlers"]()
    elif "HANDLERS" in globals_dict:
        table = globals_dict["HANDLERS"]

    if not isinstance(table, Mapping) or not all(
        isinstance(k, str) and callable(v) for k, v in table.items()
    ):
        raise TypeError(
            "Handlers file must return/define a mapping of job name -> callable. "
            "Define handlers() -> dict or HANDLERS = {...}."
        )

    return dict(table)


def resolve_handler(handlers: Mapping[str, Callable], name: str) -> Optional[Handler]:
    """Handler bound to `name`, or None (the job then reports "command not found")."""
    return handlers.get(name)

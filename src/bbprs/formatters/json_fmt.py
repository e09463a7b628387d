from __future__ import annotations

import dataclasses
import json
from collections.abc import Sequence
from datetime import datetime
from typing import Any


def _default(value: Any) -> Any:
    if isinstance(value, datetime):
        return value.isoformat()
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def format_json(items: Sequence[Any]) -> str:
    return json.dumps([dataclasses.asdict(item) for item in items], indent=2, default=_default)

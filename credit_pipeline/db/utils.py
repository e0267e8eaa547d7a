"""Helpers shared by repositories and adapters."""
import json
from datetime import date, datetime, timezone
from typing import Any


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _encode_temporal(o: Any) -> str:
    if isinstance(o, datetime):
        o = o.replace(tzinfo=timezone.utc) if o.tzinfo is None else o.astimezone(timezone.utc)
        return o.isoformat()
    if isinstance(o, date):
        return o.isoformat()
    raise TypeError(f"{type(o).__name__} is not JSON serializable")


def json_serialize(obj: Any) -> str:
    """Compact, key-sorted JSON for TEXT columns (result_json). Datetimes become UTC ISO strings."""
    return json.dumps(obj, ensure_ascii=False, sort_keys=True, separators=(",", ":"), default=_encode_temporal)

"""Sample records fed to the aggregation engine.

A decoder turns each line or element of a load-test log into one
:class:`Sample`. The engine never sees the raw log format.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Mapping

# JTL attribute names mapped to Sample fields
_JTL_ALIASES = {
    "ts": "timestamp",
    "lb": "label",
    "t": "elapsed",
    "by": "bytes",
    "s": "success",
}

_TRUE_STRINGS = frozenset({"true", "1", "yes"})
_FALSE_STRINGS = frozenset({"false", "0", "no", ""})


@dataclass(frozen=True)
class Sample:
    """One observed request/response event.

    Attributes:
        timestamp: Epoch milliseconds at which the sample was recorded.
        label: Hierarchical, path-like name of the logical request.
        elapsed: Response time in milliseconds.
        bytes: Response size in bytes (0 if unknown).
        success: Whether the request succeeded.
    """

    timestamp: int
    label: str
    elapsed: int
    bytes: int = 0
    success: bool = True

    def __post_init__(self) -> None:
        if self.elapsed < 0:
            raise ValueError(f"elapsed must be non-negative, got {self.elapsed}")
        if self.bytes < 0:
            raise ValueError(f"bytes must be non-negative, got {self.bytes}")

    @property
    def time(self) -> datetime:
        """Timestamp as a timezone-aware UTC datetime."""
        return datetime.fromtimestamp(self.timestamp / 1000.0, tz=timezone.utc)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Sample":
        """Construct a Sample from a mapping of field values.

        Accepts either the field names of this class or the JTL attribute
        abbreviations (``ts``, ``lb``, ``t``, ``by``, ``s``). String values are
        coerced, so the attribute dict of a parsed ``<httpSample>`` element can
        be passed as-is.

        Raises:
            ValueError: If a required field is missing or cannot be coerced.
        """
        fields: dict[str, Any] = {}
        for key, value in data.items():
            name = _JTL_ALIASES.get(key, key)
            if name in ("timestamp", "label", "elapsed", "bytes", "success"):
                fields[name] = value

        missing = [f for f in ("timestamp", "label", "elapsed") if f not in fields]
        if missing:
            raise ValueError(f"Sample is missing required field(s): {missing}")

        return cls(
            timestamp=int(fields["timestamp"]),
            label=str(fields["label"]),
            elapsed=int(fields["elapsed"]),
            bytes=int(fields.get("bytes") or 0),
            success=_coerce_bool(fields.get("success", True)),
        )


def _coerce_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in _TRUE_STRINGS:
            return True
        if lowered in _FALSE_STRINGS:
            return False
        raise ValueError(f"Cannot interpret {value!r} as a success flag")
    return bool(value)

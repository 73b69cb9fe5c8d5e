"""
Records handed to the store by the profiler.

* :class:`ProfileResult` — finished statistics for one column.
* :class:`TextRecord` — raw sample values of one column for keyword search.

Both are transient: built upstream, written once, never kept by the store.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

__all__ = ["ProfileResult", "TextRecord"]


def _pick(data: Mapping[str, Any], camel: str, snake: str, default: Any = None) -> Any:
    """Read a key in either its document (camelCase) or Python spelling."""
    if camel in data:
        return data[camel]
    return data.get(snake, default)


# ---------------------------------------------------------------------------
# ProfileResult — per-column statistics
# ---------------------------------------------------------------------------

@dataclass
class ProfileResult:
    """All computed statistics for a single column."""

    id: int
    """Column identifier; also the ``profile`` document id."""

    source_name: str
    column_name: str
    data_type: str
    """``"T"`` for text, ``"N"`` for numeric."""

    total_values: int = 0
    unique_values: int = 0

    entities: list[str] = field(default_factory=list)
    """Detected entity labels. Indexed as one analyzed string."""

    # ── Numeric column stats ───────────────────────────────────────────
    min_value: float = 0.0
    max_value: float = 0.0
    avg_value: float = 0.0
    median: int = 0
    iqr: int = 0

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> ProfileResult:
        """Parse a profile from a JSON object.

        Accepts the index document keys (``sourceName``) as well as the
        attribute names (``source_name``).  A string ``entities`` value is
        split on commas.
        """
        entities = data.get("entities") or []
        if isinstance(entities, str):
            entities = [e.strip() for e in entities.strip("[]").split(",") if e.strip()]
        return cls(
            id=int(data["id"]),
            source_name=_pick(data, "sourceName", "source_name", ""),
            column_name=_pick(data, "columnName", "column_name", ""),
            data_type=_pick(data, "dataType", "data_type", "T"),
            total_values=int(_pick(data, "totalValues", "total_values", 0)),
            unique_values=int(_pick(data, "uniqueValues", "unique_values", 0)),
            entities=list(entities),
            min_value=float(_pick(data, "minValue", "min_value", 0.0)),
            max_value=float(_pick(data, "maxValue", "max_value", 0.0)),
            avg_value=float(_pick(data, "avgValue", "avg_value", 0.0)),
            median=int(data.get("median", 0)),
            iqr=int(data.get("iqr", 0)),
        )


# ---------------------------------------------------------------------------
# TextRecord — sample values for the keyword index
# ---------------------------------------------------------------------------

@dataclass
class TextRecord:
    id: int
    source_name: str
    column_name: str
    values: list[str] = field(default_factory=list, repr=False)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> TextRecord:
        return cls(
            id=int(data["id"]),
            source_name=_pick(data, "sourceName", "source_name", ""),
            column_name=_pick(data, "columnName", "column_name", ""),
            values=[str(v) for v in data.get("values", [])],
        )

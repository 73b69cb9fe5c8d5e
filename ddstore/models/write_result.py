"""
WriteResult — outcome of a single document write.

Replaces the unconditional ``True`` of the legacy store: a failed write keeps
its underlying exception so callers can decide to retry or alert.  The
object is truthy exactly when the write succeeded.
"""

from __future__ import annotations

from dataclasses import dataclass

__all__ = ["WriteResult"]


@dataclass(frozen=True)
class WriteResult:
    ok: bool
    index: str
    doc_id: str | None = None
    result: str | None = None
    """Elasticsearch outcome, ``"created"`` or ``"updated"``."""

    error: BaseException | None = None

    def __bool__(self) -> bool:  # noqa: D105
        return self.ok

    @classmethod
    def success(cls, index: str, doc_id: str | None, result: str | None) -> WriteResult:
        return cls(ok=True, index=index, doc_id=doc_id, result=result)

    @classmethod
    def failure(cls, index: str, doc_id: str | None, error: BaseException) -> WriteResult:
        return cls(ok=False, index=index, doc_id=doc_id, error=error)

"""
Store protocol — the contract the profiler writes through.

Any backend that provisions its schema once and then accepts text and
profile documents satisfies it.  :class:`~ddstore.store.elastic_store.ElasticStore`
is the production implementation.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from ddstore.models.profile_result import ProfileResult
    from ddstore.models.write_result import WriteResult

__all__ = ["Store"]


@runtime_checkable
class Store(Protocol):
    """Protocol all profile stores must satisfy."""

    def init_store(self, *, recreate: bool = False) -> dict[str, bool]:
        """Ensure indices and mappings exist; return readiness per index."""
        ...

    def index_data(
        self, id: int, source_name: str, column_name: str, values: list[str],
    ) -> WriteResult:
        """Write the sample values of one column to the text index."""
        ...

    def store_document(self, result: ProfileResult) -> WriteResult:
        """Write one column profile, keyed by its id."""
        ...

    def tear_down_store(self) -> None:
        """Release the connection."""
        ...

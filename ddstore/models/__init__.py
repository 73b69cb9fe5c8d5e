"""Records exchanged between the profiler and the store."""

from ddstore.models.profile_result import ProfileResult, TextRecord
from ddstore.models.write_result import WriteResult

__all__ = [
    "ProfileResult",
    "TextRecord",
    "WriteResult",
]

"""
Session-aware read and write policies.
"""

from .state import RequestCacheState
from .lookup import LookupPolicy
from .write import WriteDecision, WriteOutcome, WritePolicy, is_cacheable

__all__ = [
    "RequestCacheState",
    "LookupPolicy",
    "WriteDecision",
    "WriteOutcome",
    "WritePolicy",
    "is_cacheable",
]

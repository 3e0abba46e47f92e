"""Client identity resolution for calldesk.

Finds the one client of a campaign matching a partial or misspelled
name, first name and phone fragments:
- Exact pass: unique case-insensitive full-name match
- Fuzzy pass: streamed, phone-bounded similarity scan with early exit
"""

from .engine import ClientResolver
from .query import ClientFilter, FieldPattern, PatternBuilder, QueryBuilder
from .selector import MatchPass, MatchResult, ResultSelector
from .similarity import similarity
from .stages import ExactMatchStage, FuzzyMatchStage, FuzzyOutcome
from .store import ClientStore, SQLClientStore, StoreUnavailable

__all__ = [
    "ClientFilter",
    "ClientResolver",
    "ClientStore",
    "ExactMatchStage",
    "FieldPattern",
    "FuzzyMatchStage",
    "FuzzyOutcome",
    "MatchPass",
    "MatchResult",
    "PatternBuilder",
    "QueryBuilder",
    "ResultSelector",
    "SQLClientStore",
    "StoreUnavailable",
    "similarity",
]

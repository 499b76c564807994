"""
Query package: predicate composition plus sync and async engines.
"""

from logbench.query.async_engine import AsyncLogQueryEngine
from logbench.query.builder import PredicateSet, build_predicates, like_pattern
from logbench.query.engine import LogQueryEngine

__all__ = [
    "AsyncLogQueryEngine",
    "LogQueryEngine",
    "PredicateSet",
    "build_predicates",
    "like_pattern",
]

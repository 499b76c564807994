"""
Predicate composition for filtered log reads.

A SearchFilter becomes a PredicateSet: SQL fragments with `{}` slots plus the
bound values, in order. Rendering fills the slots for a driver's parameter
style, so psycopg (`%s`) and asyncpg (`$1, $2, ...`) execute the same
predicates:

    predicates = build_predicates(search_filter)
    sql, params = predicates.select_sql("pyformat", limit=50, offset=0)

Every fragment maps onto one of the table's indexes: B-tree on user_id and
domain, BRIN on created_at, the english tsvector GIN index for full-text, and
the trigram GIN index on content::text for ILIKE.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, List, Literal, Tuple

from logbench.domain.models import SearchFilter, SearchMode
from logbench.infrastructure.log_store import RECORD_COLUMNS, TABLE

ParamStyle = Literal["pyformat", "numeric"]

FTS_PREDICATE = "to_tsvector('english', content::text) @@ plainto_tsquery('english', {})"
PARTIAL_PREDICATE = "content::text ILIKE {}"
ORDER_BY = "ORDER BY created_at DESC, id DESC"


def like_pattern(term: str) -> str:
    """`%term%` with LIKE metacharacters escaped, so the term matches literally."""
    escaped = term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


@dataclass
class PredicateSet:
    clauses: List[str] = field(default_factory=list)
    params: List[Any] = field(default_factory=list)

    def add(self, clause: str, value: Any) -> None:
        self.clauses.append(clause)
        self.params.append(value)

    def where_template(self) -> str:
        if not self.clauses:
            return ""
        return " WHERE " + " AND ".join(self.clauses)

    def count_sql(self, style: ParamStyle) -> Tuple[str, List[Any]]:
        template = f"SELECT COUNT(*) FROM {TABLE}{self.where_template()}"
        return _render(template, style), list(self.params)

    def select_sql(self, style: ParamStyle, limit: int, offset: int) -> Tuple[str, List[Any]]:
        template = (
            f"SELECT {RECORD_COLUMNS} FROM {TABLE}{self.where_template()} "
            f"{ORDER_BY} LIMIT {{}} OFFSET {{}}"
        )
        return _render(template, style), [*self.params, limit, offset]


def _render(template: str, style: ParamStyle) -> str:
    slots = template.count("{}")
    if style == "numeric":
        return template.format(*(f"${n}" for n in range(1, slots + 1)))
    return template.format(*(["%s"] * slots))


def build_predicates(search_filter: SearchFilter) -> PredicateSet:
    """AND-combine every filter that is present; absent filters add nothing."""
    predicates = PredicateSet()

    user_uuid = search_filter.user_uuid
    if user_uuid is not None:
        predicates.add("user_id = {}", user_uuid)

    if search_filter.domain is not None:
        predicates.add("domain = {}", search_filter.domain)

    lower = search_filter.lower_bound
    if lower is not None:
        predicates.add("created_at >= {}", lower)

    upper = search_filter.upper_bound
    if upper is not None:
        predicates.add("created_at <= {}", upper)

    mode = search_filter.search_mode
    if mode is SearchMode.FTS:
        predicates.add(FTS_PREDICATE, search_filter.full_text)
    elif mode is SearchMode.PARTIAL:
        predicates.add(PARTIAL_PREDICATE, like_pattern(search_filter.partial or ""))

    return predicates


__all__ = [
    "ParamStyle",
    "PredicateSet",
    "build_predicates",
    "like_pattern",
]

"""Query helpers shared by both search backends."""

from __future__ import annotations

from typing import Any, Optional, Sequence, Union

from ..exceptions import QueryValidationError
from .types import Filter, Predicate, Query

_OPERATION = "getQPredicate"


def get_q_predicate(filters: Sequence[Filter] | None) -> Optional[Predicate]:
    """Return the single ``term`` predicate of a query, if any.

    Raises:
        QueryValidationError: more than one filter (or predicate) carries a
            term, a term is OR'd with other predicates, or the term is not a
            plain string.
    """
    if not filters:
        return None

    term_filters = [f for f in filters if any("term" in p for p in f.predicates)]
    if len(term_filters) > 1:
        raise QueryValidationError(
            _OPERATION,
            f"IQuery can only have 1 IFilter with a 'term' predicate but {len(term_filters)} were detected",
        )
    if not term_filters:
        return None

    block = term_filters[0]
    term_predicates = [p for p in block.predicates if "term" in p]
    if len(term_predicates) > 1:
        raise QueryValidationError(
            _OPERATION,
            f"IQuery can only have 1 'term' predicate but {len(term_predicates)} were detected",
        )
    if block.operation == "OR" and len(block.predicates) > 1:
        raise QueryValidationError(_OPERATION, "'term' predicates cannot be OR'd to other predicates")

    predicate = term_predicates[0]
    if not isinstance(predicate["term"], str):
        raise QueryValidationError(
            _OPERATION,
            "'term' predicate must have a string value, string[] and IMatchOptions are not allowed.",
        )
    return predicate


def get_q_query_param(query: Query) -> Optional[str]:
    """The free-text term of ``query``, or None."""
    predicate = get_q_predicate(query.filters)
    return predicate["term"] if predicate else None


def build_term_query(term: str, target_entity: str = "item") -> Query:
    return Query(target_entity=target_entity, filters=[Filter(predicates=[{"term": term}])])


def coerce_query(query_or_term: Union[Query, str, dict[str, Any]], target_entity: str = "item") -> Query:
    """Accept a :class:`Query`, its JSON form, or a bare search term."""
    if isinstance(query_or_term, Query):
        return query_or_term.model_copy(deep=True)
    if isinstance(query_or_term, str):
        return build_term_query(query_or_term, target_entity)
    return Query.model_validate(query_or_term)


def apply_scope(query: Query, scope: Optional[Query]) -> Query:
    """Return a copy of ``query`` with the scope's filters appended.

    Scope filters only ever narrow a query; they are never replaced.
    """
    merged = query.model_copy(deep=True)
    if scope is not None:
        merged.filters = merged.filters + [f.model_copy(deep=True) for f in scope.filters]
    return merged


__all__ = [
    "apply_scope",
    "build_term_query",
    "coerce_query",
    "get_q_predicate",
    "get_q_query_param",
]

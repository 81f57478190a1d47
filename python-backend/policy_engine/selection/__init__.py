"""Clause selection."""

from .scoring import calculate_clause_score, risk_score, selection_reasons, tag_score, tool_mode_score
from .selector import (
    ClauseSelector,
    SelectorOptions,
    clause_ids,
    matches_constraints,
    select_clauses,
    summarise_selection,
)

__all__ = [
    "ClauseSelector",
    "SelectorOptions",
    "calculate_clause_score",
    "clause_ids",
    "matches_constraints",
    "risk_score",
    "select_clauses",
    "selection_reasons",
    "summarise_selection",
    "tag_score",
    "tool_mode_score",
]

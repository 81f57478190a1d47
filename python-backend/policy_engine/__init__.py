"""Policy clause selection and diff engine."""

from .corpus import ClauseCorpus, load_default_corpus
from .diffing import (
    LcsDiffer,
    PositionalWordDiffer,
    apply_redline_changes,
    diff_policies,
    generate_redline_changes,
    render_redline_html,
)
from .models import (
    ClauseSelectionInput,
    DiffOptions,
    PolicyClause,
    PolicyDiff,
    PolicyTemplate,
    RedlineChange,
    SelectedClause,
)
from .selection import ClauseSelector, SelectorOptions, select_clauses

__all__ = [
    "ClauseCorpus",
    "load_default_corpus",
    "ClauseSelector",
    "SelectorOptions",
    "select_clauses",
    "LcsDiffer",
    "PositionalWordDiffer",
    "diff_policies",
    "generate_redline_changes",
    "apply_redline_changes",
    "render_redline_html",
    "ClauseSelectionInput",
    "DiffOptions",
    "PolicyClause",
    "PolicyDiff",
    "PolicyTemplate",
    "RedlineChange",
    "SelectedClause",
]

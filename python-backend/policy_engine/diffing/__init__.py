"""Policy diffing: LCS reports and positional redlines."""

from __future__ import annotations

from typing import List, Optional, Sequence

from ..models import DiffOptions, PolicyDiff, RedlineChange
from .lcs import LcsDiffer, PolicyText, segment_text, summarise_diffs
from .redline import PositionalWordDiffer, find_text_position, tokenize_text


def diff_policies(
    base_policy: PolicyText,
    new_policy: PolicyText,
    options: Optional[DiffOptions] = None,
) -> List[PolicyDiff]:
    return LcsDiffer().diff_policies(base_policy, new_policy, options)


def generate_redline_changes(
    base_text: str,
    new_text: str,
    author: Optional[str] = None,
    options: Optional[DiffOptions] = None,
) -> List[RedlineChange]:
    return PositionalWordDiffer().generate_redline_changes(base_text, new_text, author, options)


def apply_redline_changes(base_text: str, changes: Sequence[RedlineChange]) -> str:
    return PositionalWordDiffer().apply_redline_changes(base_text, changes)


def render_redline_html(
    base_text: str, changes: Sequence[RedlineChange], title: Optional[str] = None
) -> str:
    return PositionalWordDiffer().render_redline_html(base_text, changes, title)


__all__ = [
    "LcsDiffer",
    "PositionalWordDiffer",
    "apply_redline_changes",
    "diff_policies",
    "find_text_position",
    "generate_redline_changes",
    "render_redline_html",
    "segment_text",
    "summarise_diffs",
    "tokenize_text",
]

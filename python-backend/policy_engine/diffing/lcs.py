"""Segment-level policy diffing based on a longest common subsequence."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Dict, List, Literal, Optional, Sequence, Union

import structlog

from ..config_loader import get_setting
from ..models import DiffOptions, GeneratedPolicy, PolicyDiff

logger = structlog.get_logger(__name__)

_SENTENCE_SPLIT = re.compile(r"[.!?]+")
_PARAGRAPH_SPLIT = re.compile(r"\n\s*\n")

PolicyText = Union[str, GeneratedPolicy]
OperationType = Literal["equal", "insert", "delete"]


@dataclass
class DiffOperation:
    """A run of consecutive segments sharing one edit type."""

    type: OperationType
    segments: List[str] = field(default_factory=list)


def _policy_text(policy: PolicyText) -> str:
    if isinstance(policy, GeneratedPolicy):
        return policy.document.content
    return policy or ""


def segment_text(text: str, granularity: str = "sentence") -> List[str]:
    """Split text into diff units; unknown granularities fall back to sentences."""

    if granularity == "word":
        return text.split()
    if granularity == "paragraph":
        parts = _PARAGRAPH_SPLIT.split(text)
    else:
        parts = _SENTENCE_SPLIT.split(text)
    return [part.strip() for part in parts if part.strip()]


def _normalise(segment: str, options: DiffOptions) -> str:
    if options.ignore_whitespace:
        segment = " ".join(segment.split())
    if options.ignore_case:
        segment = segment.lower()
    return segment


def compute_lcs(
    seq_a: Sequence[str], seq_b: Sequence[str], options: Optional[DiffOptions] = None
) -> List[List[int]]:
    """Return the full (m+1) x (n+1) LCS length table."""

    options = options or DiffOptions()
    norm_a = [_normalise(segment, options) for segment in seq_a]
    norm_b = [_normalise(segment, options) for segment in seq_b]
    m, n = len(norm_a), len(norm_b)
    table = [[0] * (n + 1) for _ in range(m + 1)]
    for i in range(1, m + 1):
        row, prev = table[i], table[i - 1]
        for j in range(1, n + 1):
            if norm_a[i - 1] == norm_b[j - 1]:
                row[j] = prev[j - 1] + 1
            else:
                row[j] = max(prev[j], row[j - 1])
    return table


def consolidate_changes(changes: Sequence[DiffOperation]) -> List[DiffOperation]:
    consolidated: List[DiffOperation] = []
    for change in changes:
        if consolidated and consolidated[-1].type == change.type:
            consolidated[-1].segments.extend(change.segments)
        else:
            consolidated.append(DiffOperation(change.type, list(change.segments)))
    return consolidated


def extract_changes(
    seq_a: Sequence[str],
    seq_b: Sequence[str],
    table: Sequence[Sequence[int]],
    options: Optional[DiffOptions] = None,
) -> List[DiffOperation]:
    """Backtrack through the LCS table into consolidated edit runs.

    On ties the walk prefers insertions, so a replaced segment reads as a
    deletion followed by an addition.
    """

    options = options or DiffOptions()
    changes: List[DiffOperation] = []
    i, j = len(seq_a), len(seq_b)
    while i > 0 or j > 0:
        if (
            i > 0
            and j > 0
            and _normalise(seq_a[i - 1], options) == _normalise(seq_b[j - 1], options)
        ):
            changes.append(DiffOperation("equal", [seq_a[i - 1]]))
            i -= 1
            j -= 1
        elif j > 0 and (i == 0 or table[i][j - 1] >= table[i - 1][j]):
            changes.append(DiffOperation("insert", [seq_b[j - 1]]))
            j -= 1
        else:
            changes.append(DiffOperation("delete", [seq_a[i - 1]]))
            i -= 1
    changes.reverse()
    return consolidate_changes(changes)


def describe_change(change: DiffOperation) -> str:
    count = len(change.segments)
    verb = "Added" if change.type == "insert" else "Removed"
    unit = "segment" if count == 1 else "segments"
    return f"{verb} {count} {unit}"


class LcsDiffer:
    """Reports what changed between two policies at a coarse granularity."""

    def __init__(self, options: Optional[DiffOptions] = None) -> None:
        self.options = options or DiffOptions(
            granularity=str(get_setting("diffing", "granularity", "sentence"))
        )

    def diff_policies(
        self,
        base_policy: PolicyText,
        new_policy: PolicyText,
        options: Optional[DiffOptions] = None,
    ) -> List[PolicyDiff]:
        options = options or self.options
        logger.debug(
            "diffing policies",
            granularity=options.granularity,
            ignore_case=options.ignore_case,
            ignore_whitespace=options.ignore_whitespace,
        )

        base_segments = segment_text(_policy_text(base_policy), options.granularity)
        new_segments = segment_text(_policy_text(new_policy), options.granularity)
        table = compute_lcs(base_segments, new_segments, options)
        changes = extract_changes(base_segments, new_segments, table, options)

        diffs: List[PolicyDiff] = []
        position = 0
        for change in changes:
            if change.type != "equal":
                joined = " ".join(change.segments)
                diffs.append(
                    PolicyDiff(
                        type="addition" if change.type == "insert" else "deletion",
                        old_text=joined if change.type == "delete" else None,
                        new_text=joined if change.type == "insert" else None,
                        position=position,
                        description=describe_change(change),
                    )
                )
            position += len(change.segments)
        return diffs


def summarise_diffs(diffs: Sequence[PolicyDiff]) -> Dict[str, int]:
    counts = {"addition": 0, "deletion": 0, "modification": 0}
    for diff in diffs:
        counts[diff.type] += 1
    return counts

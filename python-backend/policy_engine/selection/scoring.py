"""Relevance scoring for policy clauses."""

from __future__ import annotations

from typing import List, Sequence

from ..config_loader import get_weight
from ..models import RISK_LEVELS, TOOL_USE_MODES, ClauseSelectionInput, PolicyClause


def _index(values: Sequence[str], value: str) -> int:
    # Unknown values index as -1 and so never compare equal to a real level.
    try:
        return values.index(value)
    except ValueError:
        return -1


def risk_score(clause: PolicyClause, risk_profile: str) -> float:
    """Score how well a clause's risk level fits the requested profile.

    Clauses at or below the profile lose 0.2 per step; clauses above it lose
    0.3 per step with a floor of 0.3.
    """

    clause_index = _index(RISK_LEVELS, clause.risk_level)
    input_index = _index(RISK_LEVELS, risk_profile)
    if clause_index <= input_index:
        return 1.0 - (input_index - clause_index) * 0.2
    return max(0.3, 1.0 - (clause_index - input_index) * 0.3)


def tool_mode_score(clause: PolicyClause, tool_use_mode: str) -> float:
    """Score a clause against the tool-use mode using its closest mode."""

    if not clause.tool_use_modes:
        return 0.5
    if tool_use_mode in clause.tool_use_modes:
        return 1.0

    input_index = _index(TOOL_USE_MODES, tool_use_mode)
    clause_indexes = [_index(TOOL_USE_MODES, mode) for mode in clause.tool_use_modes]
    closest = clause_indexes[0]
    for mode_index in clause_indexes[1:]:
        if abs(mode_index - input_index) < abs(closest - input_index):
            closest = mode_index
    distance = abs(closest - input_index)
    return max(0.2, 1.0 - distance * 0.3)


def _tags_overlap(tag: str, custom_tag: str) -> bool:
    tag = tag.lower()
    custom_tag = custom_tag.lower()
    return custom_tag in tag or tag in custom_tag


def tag_score(clause: PolicyClause, custom_tags: Sequence[str] | None) -> float:
    if not custom_tags:
        return 0.5
    matching = [
        tag for tag in clause.tags if any(_tags_overlap(tag, custom) for custom in custom_tags)
    ]
    return len(matching) / max(len(clause.tags), len(custom_tags))


def calculate_clause_score(clause: PolicyClause, selection: ClauseSelectionInput) -> float:
    """Compute the relevance score of a clause for a selection context.

    The weighted terms are added on top of a fixed base and the total is
    clamped to 1.0; it is not a normalised weighted average.
    """

    score = get_weight("base", 0.5)
    score += risk_score(clause, selection.risk_profile) * get_weight("risk_weight", 0.30)
    score += tool_mode_score(clause, selection.tool_use_mode) * get_weight("tool_mode_weight", 0.25)

    if clause.audience and selection.audience in clause.audience:
        score += get_weight("audience_bonus", 0.2)

    score += tag_score(clause, selection.custom_tags) * get_weight("tag_weight", 0.15)

    if selection.state and clause.jurisdictions and selection.state in clause.jurisdictions:
        score += get_weight("state_bonus", 0.1)

    return min(score, 1.0)


def selection_reasons(
    clause: PolicyClause, selection: ClauseSelectionInput, score: float
) -> List[str]:
    """Human-readable rationale for including a clause."""

    reasons: List[str] = []

    if clause.risk_level == selection.risk_profile:
        reasons.append(f"Matches {selection.risk_profile} risk profile")
    elif clause.risk_level == "critical" and selection.risk_profile == "high":
        reasons.append("Critical clause recommended for high-risk environment")

    if clause.audience and selection.audience in clause.audience:
        reasons.append(f"Specifically designed for {selection.audience} institutions")

    if clause.tool_use_modes and selection.tool_use_mode in clause.tool_use_modes:
        reasons.append(f"Applicable to {selection.tool_use_mode} tool use policy")

    if selection.state and clause.jurisdictions and selection.state in clause.jurisdictions:
        reasons.append(f"Includes {selection.state} jurisdiction requirements")

    if score > get_weight("high_relevance", 0.8):
        reasons.append("High relevance to your policy context")

    if selection.custom_tags:
        # Only tags containing a requested tag are named here.
        matching = [
            tag
            for tag in clause.tags
            if any(custom.lower() in tag.lower() for custom in selection.custom_tags)
        ]
        if matching:
            reasons.append(f"Addresses: {', '.join(matching)}")

    return reasons or ["Standard policy component"]

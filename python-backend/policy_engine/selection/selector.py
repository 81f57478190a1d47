"""Clause selection: filtering, ranking and dependency/conflict resolution."""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Set

import structlog

from ..config_loader import get_setting
from ..corpus import ClauseCorpus, load_default_corpus
from ..models import ClauseSelectionInput, PolicyClause, SelectedClause
from .scoring import calculate_clause_score, selection_reasons

logger = structlog.get_logger(__name__)


@dataclass
class SelectorOptions:
    """Tuning knobs for clause selection."""

    transitive_dependencies: bool = field(
        default_factory=lambda: bool(get_setting("selection", "transitive_dependencies", False))
    )
    dependency_score: float = field(
        default_factory=lambda: float(get_setting("selection", "dependency_score", 0.9))
    )
    manual_include_score: float = field(
        default_factory=lambda: float(get_setting("selection", "manual_include_score", 1.0))
    )


@dataclass
class ScoredClause:
    clause: PolicyClause
    score: float
    reasons: List[str]


def matches_constraints(clause: PolicyClause, selection: ClauseSelectionInput) -> bool:
    """Return True if the clause's audience, jurisdiction and mode allow it.

    A missing constraint on the clause matches everything; an empty list
    matches nothing.
    """

    if clause.audience is not None and selection.audience not in clause.audience:
        return False
    if (
        selection.jurisdiction
        and clause.jurisdictions is not None
        and selection.jurisdiction not in clause.jurisdictions
    ):
        return False
    if (
        clause.tool_use_modes is not None
        and selection.tool_use_mode not in clause.tool_use_modes
    ):
        return False
    return True


class ClauseSelector:
    """Selects a consistent, ranked set of clauses for a selection context."""

    def __init__(
        self,
        corpus: Optional[ClauseCorpus] = None,
        options: Optional[SelectorOptions] = None,
    ) -> None:
        self.corpus = corpus or load_default_corpus()
        self.options = options or SelectorOptions()

    def select_clauses(self, selection: ClauseSelectionInput) -> List[SelectedClause]:
        log = logger.bind(
            audience=selection.audience,
            risk_profile=selection.risk_profile,
            tool_use_mode=selection.tool_use_mode,
        )
        log.debug("selecting clauses")

        candidates = [clause for clause in self.corpus if matches_constraints(clause, selection)]

        scored: List[ScoredClause] = []
        for clause in candidates:
            score = calculate_clause_score(clause, selection)
            scored.append(ScoredClause(clause, score, selection_reasons(clause, selection, score)))

        # sort() is stable, so ties keep corpus order.
        scored.sort(key=lambda item: item.score, reverse=True)

        resolved = self._resolve_dependencies_and_conflicts(scored)
        final = self._apply_manual_overrides(resolved, selection)
        log.debug("clauses selected", candidates=len(candidates), selected=len(final))

        return [
            SelectedClause(
                **item.clause.model_dump(),
                selected=True,
                reason="; ".join(item.reasons),
                priority=index + 1,
                score=item.score,
            )
            for index, item in enumerate(final)
        ]

    def _dependency_ids(self, clause: PolicyClause, selected: Set[str]) -> List[str]:
        if not self.options.transitive_dependencies:
            return list(clause.dependencies)

        ordered: List[str] = []
        seen: Set[str] = {clause.id}
        queue = deque(clause.dependencies)
        while queue:
            dep_id = queue.popleft()
            if dep_id in seen:
                continue
            seen.add(dep_id)
            ordered.append(dep_id)
            dep_clause = self.corpus.get_clause(dep_id)
            if dep_clause is not None and dep_id not in selected:
                queue.extend(dep_clause.dependencies)
        return ordered

    def _resolve_dependencies_and_conflicts(
        self, scored: Sequence[ScoredClause]
    ) -> List[ScoredClause]:
        selected: Set[str] = set()
        result: List[ScoredClause] = []

        for item in scored:
            clause = item.clause
            if clause.id in selected:
                continue
            if any(conflict_id in selected for conflict_id in clause.conflicts):
                logger.info("skipping clause due to conflict", clause_id=clause.id)
                continue

            selected.add(clause.id)
            result.append(item)

            # Dependencies are force-selected without their own conflict check.
            for dep_id in self._dependency_ids(clause, selected):
                if dep_id in selected:
                    continue
                dep_clause = self.corpus.get_clause(dep_id)
                if dep_clause is None:
                    continue
                selected.add(dep_id)
                result.append(
                    ScoredClause(
                        dep_clause,
                        self.options.dependency_score,
                        [f"Required dependency for {clause.title}"],
                    )
                )

        return result

    def _apply_manual_overrides(
        self, clauses: Sequence[ScoredClause], selection: ClauseSelectionInput
    ) -> List[ScoredClause]:
        result = list(clauses)

        if selection.exclude_clauses:
            excluded = set(selection.exclude_clauses)
            result = [item for item in result if item.clause.id not in excluded]

        if selection.include_clauses:
            present = {item.clause.id for item in result}
            for include_id in selection.include_clauses:
                if include_id in present:
                    continue
                clause = self.corpus.get_clause(include_id)
                if clause is None:
                    continue
                present.add(include_id)
                result.append(
                    ScoredClause(clause, self.options.manual_include_score, ["Manually included"])
                )

        return result

    def get_available_clauses(
        self, audience: Optional[str] = None, tags: Optional[Sequence[str]] = None
    ) -> List[PolicyClause]:
        available: List[PolicyClause] = []
        for clause in self.corpus:
            if audience and clause.audience is not None and audience not in clause.audience:
                continue
            if tags and not any(tag in clause.tags for tag in tags):
                continue
            available.append(clause)
        return available

    def get_clause_by_id(self, clause_id: str) -> Optional[PolicyClause]:
        return self.corpus.get_clause(clause_id)

    def search_clauses(self, query: str) -> List[PolicyClause]:
        lowered = query.lower()
        return [
            clause
            for clause in self.corpus
            if lowered in clause.title.lower()
            or lowered in clause.body.lower()
            or any(lowered in tag.lower() for tag in clause.tags)
        ]


def clause_ids(selected: Sequence[SelectedClause]) -> List[str]:
    """Clause ids in priority order, as consumed by a document renderer."""

    return [clause.id for clause in sorted(selected, key=lambda item: item.priority)]


def select_clauses(
    selection: ClauseSelectionInput, corpus: Optional[ClauseCorpus] = None
) -> List[SelectedClause]:
    return ClauseSelector(corpus=corpus).select_clauses(selection)


def summarise_selection(selected: Sequence[SelectedClause]) -> Dict[str, object]:
    """Counts per risk level plus the ordered ids, for reporting."""

    counts: Dict[str, int] = {}
    for clause in selected:
        counts[clause.risk_level] = counts.get(clause.risk_level, 0) + 1
    return {"total": len(selected), "by_risk_level": counts, "clause_ids": clause_ids(selected)}

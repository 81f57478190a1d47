"""Clause corpus loading and lookup."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Union

import structlog
import yaml

from .errors import ClauseNotFoundError, CorpusError, TemplateNotFoundError
from .models import PolicyClause, PolicyTemplate

logger = structlog.get_logger(__name__)

_SEEDS_DIR = Path(__file__).resolve().parent / "seeds"

ClauseRecord = Union[PolicyClause, Mapping[str, Any]]
TemplateRecord = Union[PolicyTemplate, Mapping[str, Any]]


class ClauseCorpus:
    """Immutable catalog of policy clauses and templates."""

    def __init__(
        self,
        clauses: Sequence[PolicyClause],
        templates: Sequence[PolicyTemplate] = (),
    ) -> None:
        self._clauses = tuple(clauses)
        self._templates = tuple(templates)
        self._clauses_by_id: Dict[str, PolicyClause] = {}
        self._templates_by_id: Dict[str, PolicyTemplate] = {}
        for clause in self._clauses:
            if clause.id in self._clauses_by_id:
                raise CorpusError(f"Duplicate clause id: {clause.id}")
            self._clauses_by_id[clause.id] = clause
        for template in self._templates:
            if template.id in self._templates_by_id:
                raise CorpusError(f"Duplicate template id: {template.id}")
            self._templates_by_id[template.id] = template

    @classmethod
    def from_records(
        cls,
        clauses: Iterable[ClauseRecord],
        templates: Iterable[TemplateRecord] = (),
    ) -> "ClauseCorpus":
        return cls(
            [PolicyClause.model_validate(record) for record in clauses],
            [PolicyTemplate.model_validate(record) for record in templates],
        )

    @property
    def clauses(self) -> tuple[PolicyClause, ...]:
        return self._clauses

    @property
    def templates(self) -> tuple[PolicyTemplate, ...]:
        return self._templates

    def __len__(self) -> int:
        return len(self._clauses)

    def __iter__(self):
        return iter(self._clauses)

    def __contains__(self, clause_id: object) -> bool:
        return clause_id in self._clauses_by_id

    def get_clause(self, clause_id: str) -> Optional[PolicyClause]:
        return self._clauses_by_id.get(clause_id)

    def get_template(self, template_id: str) -> Optional[PolicyTemplate]:
        return self._templates_by_id.get(template_id)

    def require_clause(self, clause_id: str) -> PolicyClause:
        clause = self.get_clause(clause_id)
        if clause is None:
            raise ClauseNotFoundError(clause_id)
        return clause

    def require_template(self, template_id: str) -> PolicyTemplate:
        template = self.get_template(template_id)
        if template is None:
            raise TemplateNotFoundError(template_id)
        return template

    def template_clauses(self, template_id: str) -> List[PolicyClause]:
        """Return the clauses of a template in template order.

        Clause ids that are missing from the corpus are skipped.
        """

        template = self.require_template(template_id)
        return [
            self._clauses_by_id[clause_id]
            for clause_id in template.clauses
            if clause_id in self._clauses_by_id
        ]

    def templates_for(self, audience: str) -> List[PolicyTemplate]:
        return [template for template in self._templates if template.audience == audience]

    def validate(self) -> List[str]:
        """Return integrity warnings for the dependency/conflict graph.

        Warnings are logged and returned; nothing here raises.
        """

        warnings: List[str] = []
        for clause in self._clauses:
            overlap = set(clause.dependencies) & set(clause.conflicts)
            if overlap:
                warnings.append(
                    f"{clause.id}: ids listed as both dependency and conflict: {sorted(overlap)}"
                )
            if clause.id in clause.dependencies or clause.id in clause.conflicts:
                warnings.append(f"{clause.id}: references itself")
            for dep_id in clause.dependencies:
                if dep_id not in self._clauses_by_id:
                    warnings.append(f"{clause.id}: unknown dependency {dep_id}")
            for conflict_id in clause.conflicts:
                other = self._clauses_by_id.get(conflict_id)
                if other is None:
                    warnings.append(f"{clause.id}: unknown conflict {conflict_id}")
                elif clause.id not in other.conflicts:
                    warnings.append(
                        f"{clause.id}: conflict with {conflict_id} is not declared in both directions"
                    )
        for template in self._templates:
            for clause_id in template.clauses:
                if clause_id not in self._clauses_by_id:
                    warnings.append(f"template {template.id}: unknown clause {clause_id}")

        for message in warnings:
            logger.warning("corpus integrity", detail=message)
        return warnings


def _read_seed(name: str, key: str) -> List[Dict[str, Any]]:
    path = _SEEDS_DIR / name
    if not path.exists():  # pragma: no cover
        raise FileNotFoundError(f"Seed file missing: {path}")
    with path.open("r", encoding="utf-8") as handle:
        raw = yaml.safe_load(handle) or {}
    return list(raw.get(key) or [])


@lru_cache(maxsize=1)
def load_default_corpus() -> ClauseCorpus:
    """Load the bundled clause and template catalog."""

    corpus = ClauseCorpus.from_records(
        _read_seed("clauses.yml", "clauses"),
        _read_seed("templates.yml", "templates"),
    )
    corpus.validate()
    return corpus

"""Exceptions raised by the policy engine."""

from __future__ import annotations


class PolicyEngineError(Exception):
    """Base class for policy engine errors."""


class CorpusError(PolicyEngineError, ValueError):
    """Raised when a clause corpus cannot be built from its records."""


class ClauseNotFoundError(PolicyEngineError, KeyError):
    def __init__(self, clause_id: str) -> None:
        super().__init__(clause_id)
        self.clause_id = clause_id

    def __str__(self) -> str:
        return f"Clause not found: {self.clause_id}"


class TemplateNotFoundError(PolicyEngineError, KeyError):
    def __init__(self, template_id: str) -> None:
        super().__init__(template_id)
        self.template_id = template_id

    def __str__(self) -> str:
        return f"Template not found: {self.template_id}"

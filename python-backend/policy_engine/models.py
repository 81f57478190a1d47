"""Data models for the policy clause selection and diff engine."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Literal, Optional
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

Audience = Literal["k12", "highered"]
RiskLevel = Literal["low", "medium", "high", "critical"]
ToolUseMode = Literal["prohibited", "restricted", "permitted", "encouraged"]
TemplateStatus = Literal["draft", "approved", "active", "archived"]
Granularity = Literal["word", "sentence", "paragraph"]

# Ordered from least to most severe / restrictive to permissive.
RISK_LEVELS: List[str] = ["low", "medium", "high", "critical"]
TOOL_USE_MODES: List[str] = ["prohibited", "restricted", "permitted", "encouraged"]
AUDIENCES: List[str] = ["k12", "highered"]


class WireModel(BaseModel):
    """Base model accepting both snake_case and camelCase field names."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ClauseMetadata(WireModel):
    version: int = 1
    created_at: str
    updated_at: str
    author: str
    source: Optional[str] = None
    legal_review: Optional[bool] = None


class PolicyClause(WireModel):
    """An atomic, independently selectable unit of policy text."""

    id: str
    title: str
    body: str
    tags: List[str] = Field(default_factory=list)
    risk_level: RiskLevel
    audience: Optional[List[Audience]] = None
    jurisdictions: Optional[List[str]] = None
    tool_use_modes: Optional[List[ToolUseMode]] = None
    dependencies: List[str] = Field(default_factory=list)
    conflicts: List[str] = Field(default_factory=list)
    metadata: ClauseMetadata


class TemplateMetadata(WireModel):
    created_at: str
    updated_at: str
    author: str
    approved_by: Optional[str] = None
    approval_date: Optional[str] = None
    effective_date: Optional[str] = None
    review_date: Optional[str] = None
    status: TemplateStatus = "draft"


class PolicyTemplate(WireModel):
    """Named, ordered list of clause ids used to shape a rendered document."""

    id: str
    name: str
    description: str = ""
    jurisdiction: str
    audience: Audience
    clauses: List[str] = Field(default_factory=list)
    version: int = 1
    metadata: TemplateMetadata


class ClauseSelectionInput(WireModel):
    """Selection context supplied by the caller.

    The enum-like fields are plain strings. Unknown values are
    accepted and simply fail to match during filtering and scoring.
    """

    audience: str
    risk_profile: str
    tool_use_mode: str
    state: Optional[str] = None
    jurisdiction: Optional[str] = None
    custom_tags: Optional[List[str]] = None
    exclude_clauses: Optional[List[str]] = None
    include_clauses: Optional[List[str]] = None


class SelectedClause(PolicyClause):
    selected: bool = True
    reason: str
    priority: int
    score: float = 0.0


class PolicyDiff(WireModel):
    """One detected change between two policy texts."""

    id: str = Field(default_factory=lambda: f"diff_{uuid4().hex[:12]}")
    type: Literal["addition", "deletion", "modification"]
    clause_id: Optional[str] = None
    old_text: Optional[str] = None
    new_text: Optional[str] = None
    position: int
    description: str


class RedlinePosition(WireModel):
    paragraph: int = 0
    sentence: int = 0
    word: int = 0

    def sort_key(self) -> tuple[int, int, int]:
        return (self.paragraph, self.sentence, self.word)


class RedlineChange(WireModel):
    """An author-attributed, position-addressed tracked change."""

    id: str = Field(default_factory=lambda: f"redline_{uuid4().hex[:12]}")
    type: Literal["insert", "delete", "format"]
    text: str
    position: RedlinePosition
    author: str
    timestamp: str
    comment: Optional[str] = None


class PolicyDocument(WireModel):
    title: str
    content: str
    word_count: int = 0
    page_count: int = 0


class GeneratedPolicy(WireModel):
    """A rendered policy as produced by a renderer outside this package."""

    id: str = Field(default_factory=lambda: str(uuid4()))
    template_id: str
    selected_clauses: List[SelectedClause] = Field(default_factory=list)
    document: PolicyDocument
    tracked_changes: List[RedlineChange] = Field(default_factory=list)


@dataclass
class DiffOptions:
    """Options shared by both diff strategies."""

    ignore_whitespace: bool = False
    ignore_case: bool = False
    context_lines: int = 0
    granularity: str = "sentence"

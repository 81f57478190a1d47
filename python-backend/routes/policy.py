"""FastAPI router exposing clause selection and policy diffing."""

from __future__ import annotations

from functools import lru_cache
from typing import Dict, List, Optional
from uuid import uuid4

import structlog
from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import HTMLResponse
from pydantic import Field

from policy_engine.corpus import ClauseCorpus, load_default_corpus
from policy_engine.diffing import LcsDiffer, PositionalWordDiffer, summarise_diffs
from policy_engine.errors import ClauseNotFoundError, TemplateNotFoundError
from policy_engine.models import (
    ClauseSelectionInput,
    DiffOptions,
    PolicyClause,
    PolicyDiff,
    PolicyTemplate,
    RedlineChange,
    SelectedClause,
    WireModel,
)
from policy_engine.selection import ClauseSelector, SelectorOptions, summarise_selection

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/policy", tags=["policy-engine"])


class SelectResponse(WireModel):
    clauses: List[SelectedClause]
    summary: Dict[str, object]


class DiffRequest(WireModel):
    base_text: str
    new_text: str
    granularity: str = "sentence"
    ignore_case: bool = False
    ignore_whitespace: bool = False


class DiffResponse(WireModel):
    diffs: List[PolicyDiff]
    summary: Dict[str, int]


class RedlineRequest(WireModel):
    base_text: str
    new_text: str
    author: Optional[str] = None
    ignore_case: bool = False


class RedlineResponse(WireModel):
    changes: List[RedlineChange]


class ApplyRedlineRequest(WireModel):
    base_text: str
    changes: List[RedlineChange] = Field(default_factory=list)


class ApplyRedlineResponse(WireModel):
    text: str


class RenderRedlineRequest(ApplyRedlineRequest):
    title: Optional[str] = None


@lru_cache(maxsize=1)
def get_corpus() -> ClauseCorpus:
    return load_default_corpus()


def get_selector(corpus: ClauseCorpus = Depends(get_corpus)) -> ClauseSelector:
    return ClauseSelector(corpus=corpus)


@router.post("/select", response_model=SelectResponse)
async def select_endpoint(
    selection: ClauseSelectionInput,
    transitive: Optional[bool] = Query(
        None, description="Resolve dependencies of dependencies; defaults to the config value"
    ),
    corpus: ClauseCorpus = Depends(get_corpus),
) -> SelectResponse:
    trace_id = str(uuid4())
    log = logger.bind(trace_id=trace_id, endpoint="select")
    try:
        options = SelectorOptions()
        if transitive is not None:
            options.transitive_dependencies = transitive
        selector = ClauseSelector(corpus=corpus, options=options)
        selected = selector.select_clauses(selection)
    except Exception as exc:  # pragma: no cover
        log.error("selection failed", error=str(exc))
        raise HTTPException(status_code=500, detail={"message": "Internal error", "trace_id": trace_id})
    log.info("clauses selected", count=len(selected))
    return SelectResponse(clauses=selected, summary=summarise_selection(selected))


@router.get("/clauses", response_model=List[PolicyClause])
async def list_clauses(
    audience: Optional[str] = None,
    tags: Optional[List[str]] = Query(None),
    selector: ClauseSelector = Depends(get_selector),
) -> List[PolicyClause]:
    return selector.get_available_clauses(audience, tags)


@router.get("/clauses/search", response_model=List[PolicyClause])
async def search_clauses(
    q: str = Query(..., min_length=1),
    selector: ClauseSelector = Depends(get_selector),
) -> List[PolicyClause]:
    return selector.search_clauses(q)


@router.get("/clauses/{clause_id}", response_model=PolicyClause)
async def get_clause(clause_id: str, corpus: ClauseCorpus = Depends(get_corpus)) -> PolicyClause:
    try:
        return corpus.require_clause(clause_id)
    except ClauseNotFoundError as exc:
        logger.warning("request rejected", reason="clause_not_found", clause_id=clause_id)
        raise HTTPException(status_code=404, detail=str(exc))


@router.get("/templates", response_model=List[PolicyTemplate])
async def list_templates(
    audience: Optional[str] = None, corpus: ClauseCorpus = Depends(get_corpus)
) -> List[PolicyTemplate]:
    if audience:
        return corpus.templates_for(audience)
    return list(corpus.templates)


@router.get("/templates/{template_id}", response_model=PolicyTemplate)
async def get_template(
    template_id: str, corpus: ClauseCorpus = Depends(get_corpus)
) -> PolicyTemplate:
    try:
        return corpus.require_template(template_id)
    except TemplateNotFoundError as exc:
        logger.warning("request rejected", reason="template_not_found", template_id=template_id)
        raise HTTPException(status_code=404, detail=str(exc))


@router.post("/diff", response_model=DiffResponse)
async def diff_endpoint(request: DiffRequest) -> DiffResponse:
    options = DiffOptions(
        ignore_case=request.ignore_case,
        ignore_whitespace=request.ignore_whitespace,
        granularity=request.granularity,
    )
    diffs = LcsDiffer().diff_policies(request.base_text, request.new_text, options)
    return DiffResponse(diffs=diffs, summary=summarise_diffs(diffs))


@router.post("/redline", response_model=RedlineResponse)
async def redline_endpoint(request: RedlineRequest) -> RedlineResponse:
    changes = PositionalWordDiffer().generate_redline_changes(
        request.base_text,
        request.new_text,
        request.author,
        DiffOptions(ignore_case=request.ignore_case),
    )
    return RedlineResponse(changes=changes)


@router.post("/redline/apply", response_model=ApplyRedlineResponse)
async def apply_redline_endpoint(request: ApplyRedlineRequest) -> ApplyRedlineResponse:
    text = PositionalWordDiffer().apply_redline_changes(request.base_text, request.changes)
    return ApplyRedlineResponse(text=text)


@router.post("/redline/html", response_class=HTMLResponse)
async def render_redline_endpoint(request: RenderRedlineRequest) -> HTMLResponse:
    html = PositionalWordDiffer().render_redline_html(
        request.base_text, request.changes, request.title
    )
    return HTMLResponse(content=html)

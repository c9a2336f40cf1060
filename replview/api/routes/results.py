"""JSON API for visualizers, evaluation and navigation.

Endpoints:
    GET    /v1/visualizers                      Registered visualizers in order
    POST   /v1/eval                             Evaluate code
    GET    /v1/results/current                  Current result summary
    GET    /v1/results/{result_id}/view         Render the displayed value
    POST   /v1/results/{result_id}/descend      Descend into an entry by key
    POST   /v1/results/{result_id}/ascend       Ascend to a frame index
    DELETE /v1/session                          Tear down the session
"""

import logging
from typing import Optional, Union

from fastapi import APIRouter, Depends, HTTPException, Request, Response
from pydantic import BaseModel, Field

from replview.api.deps import SESSION_COOKIE, get_result_or_404, get_session, make_context
from replview.config import get_config
from replview.navigation import NavigationError
from replview.repl.sessions import ReplSession, get_session_store
from replview.ui.schemas import RenderedView, ResultSummary
from replview.ui.view import render_view, summarize
from replview.visualizers.registry import get_dispatcher, get_visualizer_registry
from replview.visualizers.schemas import VisualizerSummary

logger = logging.getLogger(__name__)

router = APIRouter(tags=["results"])


class EvalRequest(BaseModel):
    """Code to evaluate."""

    code: str


class DescendRequest(BaseModel):
    """Entry of the displayed value to descend into."""

    key: Union[int, str] = Field(
        ...,
        description="Mapping key (matched directly, then by string form) or sequence index",
    )


class AscendRequest(BaseModel):
    """Navigation frame to return to (0 = root value)."""

    index: int


@router.get("/visualizers", response_model=list[VisualizerSummary])
async def list_visualizers():
    """List registered visualizers in registry order."""
    return get_visualizer_registry().list_summaries()


@router.post("/eval", response_model=ResultSummary)
def evaluate(request: EvalRequest, session: ReplSession = Depends(get_session)):
    """Evaluate code in the session, superseding the current result."""
    result = session.evaluate(request.code)
    return summarize(result, get_dispatcher())


@router.get("/results/current", response_model=ResultSummary)
def current_result(session: ReplSession = Depends(get_session)):
    """Summary of the current result."""
    if session.current is None:
        raise HTTPException(status_code=404, detail="No result evaluated yet")
    return summarize(session.current, get_dispatcher())


@router.get("/results/{result_id}/view", response_model=RenderedView)
def view_result(
    request: Request,
    result_id: str,
    session: ReplSession = Depends(get_session),
    v: Optional[str] = None,
):
    """Render the displayed value with the selected or best visualizer."""
    result = get_result_or_404(session, result_id)
    ctx = make_context(result, request, get_config())
    return render_view(result, get_dispatcher(), ctx, selected=v)


@router.post("/results/{result_id}/descend", response_model=ResultSummary)
def descend(
    result_id: str,
    request: DescendRequest,
    session: ReplSession = Depends(get_session),
):
    """Descend into an entry of the displayed value."""
    result = get_result_or_404(session, result_id)
    try:
        result.navigation.descend_into(request.key)
    except NavigationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    result.actions.clear()
    return summarize(result, get_dispatcher())


@router.post("/results/{result_id}/ascend", response_model=ResultSummary)
def ascend(
    result_id: str,
    request: AscendRequest,
    session: ReplSession = Depends(get_session),
):
    """Return to an earlier navigation frame."""
    result = get_result_or_404(session, result_id)
    try:
        result.navigation.ascend(request.index)
    except NavigationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    result.actions.clear()
    return summarize(result, get_dispatcher())


@router.delete("/session", status_code=204)
def drop_session(request: Request):
    """Discard the session with its namespace and result."""
    session_id = request.cookies.get(SESSION_COOKIE)
    if session_id:
        get_session_store().drop(session_id)
    response = Response(status_code=204)
    response.delete_cookie(SESSION_COOKIE, path=get_config().normalized_prefix or "/")
    return response

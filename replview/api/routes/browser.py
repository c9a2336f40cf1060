"""HTML routes for the browser UI.

Endpoints:
    GET  /                                      Page with the current result
    POST /eval                                  Evaluate code (form field 'code')
    POST /clear                                 Drop the current result
    GET  /results/{result_id}/actions/{id}      Run a click action, back to page
    GET  /results/{result_id}/breadcrumbs/{i}   Ascend to frame i, back to page
"""

import logging
from typing import Optional
from urllib.parse import urlencode

from fastapi import APIRouter, Depends, Form, HTTPException, Request
from fastapi.responses import HTMLResponse, RedirectResponse

from replview.api.deps import get_result_or_404, get_session, make_context, set_session_cookie
from replview.config import get_config
from replview.navigation import NavigationError
from replview.repl.sessions import ReplSession
from replview.ui.context import VISUALIZER_PARAM
from replview.ui.page import render_page
from replview.visualizers.registry import get_dispatcher

logger = logging.getLogger(__name__)

router = APIRouter(tags=["browser"])


def _back_to_page(request: Request, session: ReplSession, selected: Optional[str] = None):
    url = (get_config().normalized_prefix or "") + "/"
    if selected:
        url += "?" + urlencode({VISUALIZER_PARAM: selected})
    return set_session_cookie(RedirectResponse(url, status_code=303), request, session)


@router.get("/", response_class=HTMLResponse)
def index(
    request: Request,
    session: ReplSession = Depends(get_session),
    v: Optional[str] = None,
):
    """Page with the evaluation form and the current result."""
    config = get_config()
    ctx = None
    if session.current is not None:
        ctx = make_context(session.current, request, config)

    page = render_page(
        session,
        get_dispatcher(),
        ctx,
        prefix=config.normalized_prefix,
        selected=v,
    )
    return set_session_cookie(HTMLResponse(page), request, session)


@router.post("/eval")
def evaluate(
    request: Request,
    code: str = Form(...),
    session: ReplSession = Depends(get_session),
):
    """Evaluate code, superseding the current result."""
    session.evaluate(code)
    return _back_to_page(request, session)


@router.post("/clear")
def clear(request: Request, session: ReplSession = Depends(get_session)):
    """Drop the current result."""
    session.clear()
    return _back_to_page(request, session)


@router.get("/results/{result_id}/actions/{action_id}")
def run_action(
    request: Request,
    result_id: str,
    action_id: str,
    session: ReplSession = Depends(get_session),
    v: Optional[str] = None,
):
    """Run a click action registered by the last render of a result."""
    result = get_result_or_404(session, result_id)
    if not result.actions.invoke(action_id):
        raise HTTPException(status_code=404, detail=f"Action '{action_id}' not found")
    return _back_to_page(request, session, v)


@router.get("/results/{result_id}/breadcrumbs/{index}")
def ascend(
    request: Request,
    result_id: str,
    index: int,
    session: ReplSession = Depends(get_session),
):
    """Jump back to an earlier navigation frame."""
    result = get_result_or_404(session, result_id)
    try:
        result.navigation.ascend(index)
    except NavigationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    result.actions.clear()
    return _back_to_page(request, session)

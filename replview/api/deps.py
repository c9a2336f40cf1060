"""Request dependencies shared by the HTML and JSON routes."""

from fastapi import HTTPException, Request, Response

from replview.config import AppConfig, get_config
from replview.repl.sessions import EvaluationResult, ReplSession, get_session_store
from replview.ui.context import RenderContext

SESSION_COOKIE = "replview_session"


def get_session(request: Request, response: Response) -> ReplSession:
    """Session for the request's cookie, created if missing or expired.

    The cookie is set on the injected response, which FastAPI merges into
    model responses. Routes returning a Response themselves must call
    set_session_cookie().
    """
    session = get_session_store().get_or_create(request.cookies.get(SESSION_COOKIE))
    set_session_cookie(response, request, session)
    return session


def set_session_cookie(response: Response, request: Request, session: ReplSession) -> Response:
    if request.cookies.get(SESSION_COOKIE) != session.session_id:
        response.set_cookie(
            SESSION_COOKIE,
            session.session_id,
            httponly=True,
            samesite="lax",
            path=get_config().normalized_prefix or "/",
        )
    return response


def get_result_or_404(session: ReplSession, result_id: str) -> EvaluationResult:
    """The session's current result if it has this id, else 404."""
    result = session.result(result_id)
    if result is None:
        raise HTTPException(
            status_code=404,
            detail=f"Result '{result_id}' not found or superseded",
        )
    return result


def make_context(result: EvaluationResult, request: Request, config: AppConfig) -> RenderContext:
    return RenderContext(
        result=result,
        prefix=config.normalized_prefix,
        params=dict(request.query_params),
        sample_size=config.sample_size,
        max_items=config.max_items,
        page_size=config.page_size,
    )

# reliefhub/web.py
from pathlib import Path

from fastapi import Request
from fastapi.responses import RedirectResponse
from fastapi.templating import Jinja2Templates

from reliefhub.deps import get_principal, pop_flashes

# absolute path so rendering does not depend on the uvicorn working directory
TEMPLATE_DIR = Path(__file__).resolve().parent / "templates"
templates = Jinja2Templates(directory=str(TEMPLATE_DIR))


def render(request: Request, name: str, context: dict | None = None, status_code: int = 200):
    # the outermost error handler can run without a session in scope
    has_session = "session" in request.scope
    ctx = {
        "principal": get_principal(request) if has_session else None,
        "flashes": pop_flashes(request) if has_session else [],
        "request_id": getattr(request.state, "request_id", None),
    }
    ctx.update(context or {})
    return templates.TemplateResponse(request, name, ctx, status_code=status_code)


def redirect(url: str) -> RedirectResponse:
    return RedirectResponse(url=url, status_code=302)

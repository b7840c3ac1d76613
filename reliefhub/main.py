# reliefhub/main.py
import structlog
from fastapi import FastAPI, Request
from starlette.middleware.sessions import SessionMiddleware

from reliefhub.config import settings
from reliefhub.database import engine, SessionLocal
from reliefhub.errors import Forbidden, NotAuthenticated, NotFound, ReliefError
from reliefhub.logging import setup_logging, RequestIdMiddleware
from reliefhub.models import Base
from reliefhub.routers import account, donation, home, incident, volunteer
from reliefhub.services.donations import ensure_categories
from reliefhub.web import redirect, render

setup_logging()
log = structlog.get_logger(__name__)

app = FastAPI(title=settings.app_name)

app.add_middleware(
    SessionMiddleware,
    secret_key=settings.secret_key,
    same_site="lax",
    max_age=settings.session_max_age,
    session_cookie=settings.session_cookie,
)
# added last so it wraps the session middleware and every handler sees the id
app.add_middleware(RequestIdMiddleware)


def init_db() -> None:
    if settings.auto_create_db:
        Base.metadata.create_all(bind=engine)
    with SessionLocal() as db:
        added = ensure_categories(db, settings.category_names())
    if added:
        log.info("categories_seeded", added=added)


@app.on_event("startup")
def on_startup():
    init_db()


# --- error mapping ---
@app.exception_handler(NotAuthenticated)
async def not_authenticated_handler(request: Request, exc: NotAuthenticated):
    return redirect("/account/login")


@app.exception_handler(NotFound)
async def not_found_handler(request: Request, exc: NotFound):
    return render(request, "errors/not_found.html", {"message": exc.message}, status_code=404)


@app.exception_handler(Forbidden)
async def forbidden_handler(request: Request, exc: Forbidden):
    log.warning("forbidden", path=request.url.path, reason=exc.message)
    return render(request, "errors/forbidden.html", {"message": exc.message}, status_code=403)


@app.exception_handler(ReliefError)
async def relief_error_handler(request: Request, exc: ReliefError):
    return render(request, "errors/error.html", {"message": exc.message}, status_code=400)


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    log.exception("unhandled_error", path=request.url.path)
    return render(request, "errors/error.html", {"message": None}, status_code=500)


app.include_router(home.router)
app.include_router(account.router)
app.include_router(incident.router)
app.include_router(donation.router)
app.include_router(volunteer.router)

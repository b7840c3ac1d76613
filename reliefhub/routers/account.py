# reliefhub/routers/account.py
from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse
from sqlalchemy.orm import Session

from reliefhub.database import get_db
from reliefhub.deps import principal_for, sign_in, sign_out
from reliefhub.errors import DuplicateEmail, InvalidCredentials, ValidationFailed
from reliefhub.schemas import LoginIn, RegisterIn, parse_form
from reliefhub.services import accounts
from reliefhub.web import redirect, render

router = APIRouter(prefix="/account", tags=["account"])


def _echo(form) -> dict:
    # never send the password back into the page
    return {k: v for k, v in form.items() if k != "password"}


@router.get("/register", response_class=HTMLResponse)
def register_page(request: Request):
    return render(request, "account/register.html", {"form": {}, "errors": {}, "roles": accounts.signup_roles()})


@router.post("/register")
async def register(request: Request, db: Session = Depends(get_db)):
    form = await request.form()
    try:
        payload = parse_form(RegisterIn, form)
        user = accounts.register(db, payload)
    except ValidationFailed as exc:
        errors = exc.errors
    except DuplicateEmail as exc:
        errors = {"email": exc.message}
    else:
        sign_in(request, principal_for(user))
        return redirect("/")
    return render(
        request, "account/register.html",
        {"form": _echo(form), "errors": errors, "roles": accounts.signup_roles()},
        status_code=400,
    )


@router.get("/login", response_class=HTMLResponse)
def login_page(request: Request):
    return render(request, "account/login.html", {"form": {}, "errors": {}})


@router.post("/login")
async def login(request: Request, db: Session = Depends(get_db)):
    form = await request.form()
    try:
        payload = parse_form(LoginIn, form)
        user = accounts.login(db, payload.email, payload.password)
    except ValidationFailed as exc:
        errors = exc.errors
    except InvalidCredentials as exc:
        errors = {"__all__": exc.message}
    else:
        sign_in(request, principal_for(user))
        return redirect("/")
    return render(request, "account/login.html", {"form": _echo(form), "errors": errors}, status_code=400)


@router.get("/logout")
def logout(request: Request):
    sign_out(request)
    return redirect("/")

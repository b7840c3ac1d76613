# reliefhub/deps.py
from fastapi import Request
from pydantic import ValidationError

from reliefhub.errors import NotAuthenticated
from reliefhub.models import User
from reliefhub.schemas import Principal

SESSION_KEYS = ("user_id", "user_email", "user_name", "user_role")


def principal_for(user: User) -> Principal:
    return Principal(user_id=user.id, email=user.email, display_name=user.display_name, role=user.role)


def sign_in(request: Request, principal: Principal) -> None:
    request.session["user_id"] = principal.user_id
    request.session["user_email"] = principal.email
    request.session["user_name"] = principal.display_name
    request.session["user_role"] = principal.role.value


def sign_out(request: Request) -> None:
    request.session.clear()


# Optional: anonymous visitors get None
def get_principal(request: Request) -> Principal | None:
    s = request.session
    if not s.get("user_id"):
        return None
    try:
        return Principal(
            user_id=s["user_id"],
            email=s.get("user_email", ""),
            display_name=s.get("user_name", ""),
            role=s.get("user_role"),
        )
    except ValidationError:
        # cookie from an older build or tampered role; treat as signed out
        return None


def require_principal(request: Request) -> Principal:
    principal = get_principal(request)
    if principal is None:
        raise NotAuthenticated()
    return principal


# --- flash messages (shown once on the next rendered page) ---
def flash(request: Request, message: str, category: str = "success") -> None:
    request.session.setdefault("_flashes", []).append({"category": category, "message": message})


def pop_flashes(request: Request) -> list[dict]:
    return request.session.pop("_flashes", [])

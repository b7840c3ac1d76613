import structlog
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from reliefhub.config import settings
from reliefhub.errors import DuplicateEmail, InvalidCredentials, ValidationFailed
from reliefhub.models import Role, User
from reliefhub.schemas import RegisterIn
from reliefhub.security import hash_password, verify_password
from reliefhub.utils import utcnow

log = structlog.get_logger(__name__)


def find_by_email(db: Session, email: str) -> User | None:
    return db.query(User).filter(User.email == email).one_or_none()


def signup_roles() -> list[Role]:
    if settings.restrict_admin_signup:
        return [r for r in Role if r is not Role.ADMIN]
    return list(Role)


def register(db: Session, payload: RegisterIn) -> User:
    if payload.role not in signup_roles():
        raise ValidationFailed({"role": "This account type cannot be chosen at sign-up"})
    if find_by_email(db, payload.email):
        log.info("registration_rejected", reason="duplicate_email")
        raise DuplicateEmail()

    user = User(
        email=payload.email,
        password_hash=hash_password(payload.password),
        first_name=payload.first_name,
        last_name=payload.last_name,
        phone=payload.phone,
        address=payload.address,
        role=payload.role,
        is_active=True,
        created_at=utcnow(),
    )
    db.add(user)
    try:
        db.commit()
    except IntegrityError:
        # lost a race with a concurrent registration for the same email
        db.rollback()
        raise DuplicateEmail()
    db.refresh(user)
    log.info("user_registered", user_id=user.id, role=user.role.value)
    return user


def login(db: Session, email: str, password: str) -> User:
    user = find_by_email(db, email)
    if not user or not verify_password(password, user.password_hash):
        log.warning("login_failed")
        raise InvalidCredentials()

    user.last_login = utcnow()
    db.commit()
    db.refresh(user)
    log.info("user_logged_in", user_id=user.id)
    return user

# reliefhub/security.py
from passlib.context import CryptContext

from reliefhub.config import settings

# salted pbkdf2; verification is by comparison through the context
pwd_context = CryptContext(
    schemes=["pbkdf2_sha256"],
    deprecated="auto",
    pbkdf2_sha256__rounds=settings.password_rounds,
)


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain: str, hashed: str) -> bool:
    try:
        return pwd_context.verify(plain, hashed)
    except (ValueError, TypeError):
        # unrecognised or malformed stored hash
        return False

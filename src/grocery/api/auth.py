"""Bearer-token authentication and role checks.

Tokens are HS256 JWTs carrying the customer id (``id``) and role. Issuing
tokens belongs to the login service; ``create_access_token`` exists for
tooling and tests.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from fastapi import Depends, Request
from jose import ExpiredSignatureError, JWTError, jwt
from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from grocery.api.errors import ApiError, ErrorKind
from grocery.identity.customer import ADMIN_ROLES, Customer
from grocery.settings import JWT_ALGORITHM, JWT_EXPIRE_MINUTES, JWT_SECRET


@dataclass(frozen=True)
class Principal:
    """The authenticated caller of a request."""

    id: str
    role: str

    @property
    def is_admin(self) -> bool:
        return self.role in ADMIN_ROLES


def create_access_token(customer_id, role, expires_delta: timedelta | None = None) -> str:
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(minutes=JWT_EXPIRE_MINUTES))
    claims = {"id": str(customer_id), "role": role, "exp": expire, "iat": datetime.now(timezone.utc)}
    return jwt.encode(claims, JWT_SECRET, algorithm=JWT_ALGORITHM)


def decode_token(token: str) -> dict:
    try:
        return jwt.decode(token, JWT_SECRET, algorithms=[JWT_ALGORITHM])
    except ExpiredSignatureError:
        raise ApiError(401, ErrorKind.UNAUTHORIZED, "Token expired. Please login again.") from None
    except JWTError:
        raise ApiError(401, ErrorKind.UNAUTHORIZED, "Invalid token. Please login again.") from None


def _bearer_token(request: Request) -> str | None:
    header = request.headers.get("Authorization", "")
    if header.startswith("Bearer "):
        return header[len("Bearer ") :].strip() or None
    return None


def principal_from_token(token: str) -> Principal:
    """Resolve a token to an active customer. The stored role wins over the token's."""
    claims = decode_token(token)
    try:
        customer = current_domain.repository_for(Customer).get(claims.get("id"))
    except ObjectNotFoundError:
        raise ApiError(401, ErrorKind.UNAUTHORIZED, "User not found. Please login again.") from None
    if not customer.is_active:
        raise ApiError(403, ErrorKind.FORBIDDEN, "Your account has been deactivated.")
    return Principal(id=str(customer.id), role=customer.role)


async def current_principal(request: Request) -> Principal:
    token = _bearer_token(request)
    if token is None:
        raise ApiError(401, ErrorKind.UNAUTHORIZED, "Authentication required. Please login.")
    return principal_from_token(token)


async def optional_principal(request: Request) -> Principal | None:
    """Like ``current_principal`` but anonymous callers and bad tokens yield None."""
    token = _bearer_token(request)
    if token is None:
        return None
    try:
        return principal_from_token(token)
    except ApiError:
        return None


def require_roles(*roles: str):
    """Dependency factory admitting only principals with one of ``roles``."""

    async def dependency(principal: Principal = Depends(current_principal)) -> Principal:
        if principal.role not in roles:
            raise ApiError(403, ErrorKind.FORBIDDEN, "You are not authorized to perform this action.")
        return principal

    return dependency


require_admin = require_roles(*ADMIN_ROLES)
require_agent = require_roles("delivery")

"""Authentication helpers for FastAPI endpoints.

- Bearer access JWTs (HS256, settings.secret_key) are the only credential outside development.
- In development, X-User-Id / X-User-Role headers are accepted for local tools and tests.
- `require_roles` builds a reusable roles guard for routes.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional

from fastapi import Depends, Header, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from heartline.infra import jwt as jwt_helper
from heartline.settings import settings

ROLES = ("user", "moderator", "admin")


@dataclass(slots=True)
class AuthenticatedUser:
	id: str
	role: str = "user"

	def has_role(self, role: str) -> bool:
		return self.role == role


_bearer_scheme = HTTPBearer(auto_error=False)


def verify_access_jwt(token: str) -> AuthenticatedUser:
	"""Decode and validate an access JWT and return an AuthenticatedUser."""
	try:
		payload = jwt_helper.decode_access(token)
	except Exception:
		raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="invalid_token") from None

	sub = str(payload.get("sub") or "").strip()
	role = str(payload.get("role") or "user").strip().lower()
	if not sub or role not in ROLES:
		raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="invalid_token")
	return AuthenticatedUser(id=sub, role=role)


def issue_access_token(user_id: str, role: str) -> str:
	return jwt_helper.encode_access({"sub": str(user_id), "role": role})


async def get_current_user(
	x_user_id: Optional[str] = Header(default=None, alias="X-User-Id"),
	x_user_role: Optional[str] = Header(default=None, alias="X-User-Role"),
	credentials: Optional[HTTPAuthorizationCredentials] = Depends(_bearer_scheme),
) -> AuthenticatedUser:
	"""Resolve the authenticated user.

	In development we allow simple headers. In all other environments, headers are
	ignored and a valid Bearer JWT is required.
	"""
	if credentials and credentials.scheme.lower() == "bearer":
		return verify_access_jwt(credentials.credentials)

	if settings.is_dev() and x_user_id:
		role = (x_user_role or "user").strip().lower()
		if role not in ROLES:
			raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="invalid_role")
		return AuthenticatedUser(id=x_user_id.strip(), role=role)

	raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="invalid_token")


def require_roles(*required: Iterable[str]):
	"""Return a dependency that enforces the presence of any of the given roles.

	Usage:
		@router.get("/admin/reports", dependencies=[Depends(require_roles("admin", "moderator"))])
	"""
	required_set = {str(r).strip() for r in required if str(r).strip()}

	async def _dep(user: AuthenticatedUser = Depends(get_current_user)) -> AuthenticatedUser:
		if not required_set:
			return user
		if any(user.has_role(r) for r in required_set):
			return user
		raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="insufficient_role")

	return _dep

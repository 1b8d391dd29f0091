# medreminder/core/auth.py

from datetime import datetime, timedelta, timezone
from typing import Annotated, Any, Dict, Optional

import jwt
from fastapi import Depends, HTTPException, Security, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from medreminder.core import config
from medreminder.core.deps import get_auth_service

ALGORITHM = "HS256"

# Bearer para integrarse con Swagger Authorize
_bearer = HTTPBearer(auto_error=False)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


# -------------------------
# Emisión
# -------------------------
def create_access_token(user_id: str, ttl: Optional[timedelta] = None) -> str:
    now = datetime.now(timezone.utc)
    claims = {
        "sub": user_id,
        "iat": now,
        "exp": now + (ttl or timedelta(hours=config.TOKEN_TTL_HOURS)),
        "iss": config.JWT_ISSUER,
    }
    return jwt.encode(claims, config.JWT_SECRET, algorithm=ALGORITHM)


# -------------------------
# Validación
# -------------------------
def decode_access_token(token: str) -> Dict[str, Any]:
    # 1) Verifica header
    try:
        header = jwt.get_unverified_header(token)
    except jwt.PyJWTError as e:
        raise _unauthorized(f"[JWT] Invalid header: {e}")

    alg = header.get("alg")
    if alg != ALGORITHM:
        raise _unauthorized(f"[HS256-mode] Token alg={alg}. Get an HS256 token from /api/auth/login.")

    # 2) Firma/claims
    try:
        payload = jwt.decode(
            token,
            config.JWT_SECRET,
            algorithms=[ALGORITHM],
            issuer=config.JWT_ISSUER,
            options={"require": ["exp", "sub"]},
        )
    except jwt.PyJWTError as e:
        raise _unauthorized(f"[HS256] Invalid token: {e}")

    if not payload.get("sub"):
        raise _unauthorized("Token payload missing 'sub'")
    return payload


def _get_token_from_bearer(credentials: Optional[HTTPAuthorizationCredentials]) -> str:
    if not credentials or credentials.scheme.lower() != "bearer":
        raise _unauthorized("Missing or invalid Authorization header")
    return credentials.credentials


# -------------------------
# Dependencias públicas (para routers)
# -------------------------
async def get_user_id(
    credentials: Annotated[Optional[HTTPAuthorizationCredentials], Security(_bearer)],
) -> str:
    """Devuelve el 'sub' del JWT (user_id)."""
    token = _get_token_from_bearer(credentials)
    return decode_access_token(token)["sub"]


async def get_current_user(
    user_id: Annotated[str, Depends(get_user_id)],
    auth_service=Depends(get_auth_service),
):
    """Resuelve el usuario del token contra el almacén en memoria."""
    user = auth_service.get_user(user_id)
    if user is None:
        raise _unauthorized("User for token no longer exists")
    return user

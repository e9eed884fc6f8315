import os
from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import JWTError, jwt

from .actors import ActorRole

SECRET_KEY = os.getenv("JWT_SECRET_KEY")
if not SECRET_KEY:
    raise ValueError("FATAL ERROR: JWT_SECRET_KEY is not set in the environment!")

ALGORITHM = "HS256"
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "60"))

def create_access_token(data: dict, expires_delta: timedelta = None) -> str:
    """Creates a JWT access token with a UTC expiration."""
    to_encode = data.copy()

    if expires_delta:
        expire = datetime.now(timezone.utc) + expires_delta
    else:
        expire = datetime.now(timezone.utc) + timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES)

    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, SECRET_KEY, algorithm=ALGORITHM)

def create_actor_token(user_id: str, role: ActorRole, supplier_id: Optional[int] = None,
                       expires_delta: timedelta = None) -> str:
    """Token for an operator or a supplier account. Suppliers carry their supplier_id claim."""
    claims = {"sub": str(user_id), "role": role.value}
    if supplier_id is not None:
        claims["supplier_id"] = supplier_id
    return create_access_token(claims, expires_delta)

def verify_access_token(token: str) -> dict | None:
    """Decodes and verifies the JWT. Returns payload if valid, None if invalid/expired."""
    try:
        payload = jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
        return payload
    except JWTError:
        return None

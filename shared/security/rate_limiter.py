from slowapi import Limiter
from slowapi.util import get_remote_address
from fastapi import Request
from .actors import ActorRole
from .jwt_handler import verify_access_token

def actor_key(request: Request) -> str:
    """
    Key function for SlowAPI.
    Seller accounts of one shop share a budget, operators and buyers are limited per account,
    and anything without a valid token is limited per client IP.
    """
    auth_header = request.headers.get("Authorization")

    if auth_header and auth_header.startswith("Bearer "):
        payload = verify_access_token(auth_header.split(" ", 1)[1])
        if payload and "sub" in payload:
            if payload.get("role") == ActorRole.SUPPLIER.value and payload.get("supplier_id") is not None:
                return f"supplier:{payload['supplier_id']}"
            return f"user:{payload['sub']}"

    return f"ip:{get_remote_address(request)}"

limiter = Limiter(key_func=actor_key)

from .actors import Actor, ActorRole
from .jwt_handler import create_access_token, create_actor_token, verify_access_token
from .api_key import verify_api_key
from .dependencies import (
    get_current_actor,
    require_operator,
    require_buyer,
    require_supplier,
    verify_internal_api_key,
)
from .rate_limiter import actor_key, limiter

__all__ = [
    "Actor",
    "ActorRole",
    "create_access_token",
    "create_actor_token",
    "verify_access_token",
    "verify_api_key",
    "get_current_actor",
    "require_operator",
    "require_supplier",
    "require_buyer",
    "verify_internal_api_key",
    "limiter",
    "actor_key"
]

from .auth import AuthContext, Claims, TokenVerifier
from .errors import (
    BadRequest,
    Internal,
    NotFound,
    RateLimited,
    ServiceError,
    Unauthenticated,
    Unavailable,
    install_error_handlers,
)

__all__ = [
    "AuthContext",
    "Claims",
    "TokenVerifier",
    "BadRequest",
    "Internal",
    "NotFound",
    "RateLimited",
    "ServiceError",
    "Unauthenticated",
    "Unavailable",
    "install_error_handlers",
]

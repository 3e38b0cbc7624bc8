from yoked.core.security.jwt import (
    MAX_PASSWORD_BYTES,
    IssuedToken,
    TokenConfig,
    TokenData,
    TokenService,
    check_password_length,
    hash_password,
    verify_password,
)

__all__ = [
    "MAX_PASSWORD_BYTES",
    "IssuedToken",
    "TokenConfig",
    "TokenData",
    "TokenService",
    "check_password_length",
    "hash_password",
    "verify_password",
]

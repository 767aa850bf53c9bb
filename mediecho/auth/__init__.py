from mediecho.auth.utils import (
    verify_password,
    get_password_hash,
    create_access_token,
    create_refresh_token,
    decode_access_token,
    decode_refresh_token,
    get_current_user,
    get_current_user_optional,
    authenticate_user,
    set_token_cookie,
)
from mediecho.auth.subscription import check_subscription, require_brief_plan

__all__ = [
    "verify_password",
    "get_password_hash",
    "create_access_token",
    "create_refresh_token",
    "decode_access_token",
    "decode_refresh_token",
    "get_current_user",
    "get_current_user_optional",
    "authenticate_user",
    "set_token_cookie",
    "check_subscription",
    "require_brief_plan",
]

from functools import wraps

from flask import current_app, request
from flask_jwt_extended import verify_jwt_in_request, get_jwt, get_jwt_identity

from library_app.models.user import ROLES
from library_app.utils.responses import json_error


def role_required(*roles):
    """Allow the view only for a valid JWT whose ``role`` claim is one of ``roles``."""
    unknown = set(roles) - set(ROLES)
    if unknown:
        raise ValueError(f"unknown role(s): {', '.join(sorted(unknown))}")

    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            verify_jwt_in_request()
            role = (get_jwt().get("role") or "").lower()
            if role not in roles:
                current_app.logger.warning(
                    "Forbidden request",
                    extra={"event": "auth.forbidden", "path": request.path,
                           "user_id": get_jwt_identity(), "role": role or None},
                )
                return json_error("Forbidden", 403)
            return fn(*args, **kwargs)
        return wrapper
    return decorator

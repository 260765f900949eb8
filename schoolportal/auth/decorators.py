from functools import wraps

from flask_jwt_extended import current_user, verify_jwt_in_request

from ..errors import PermissionDenied


def roles_required(*roles):
    """Require a valid bearer token whose user has one of `roles`."""
    def decorator(view_func):
        @wraps(view_func)
        def wrapper(*args, **kwargs):
            verify_jwt_in_request()
            if current_user.role_name not in roles:
                raise PermissionDenied("Insufficient permissions.")
            return view_func(*args, **kwargs)
        return wrapper
    return decorator

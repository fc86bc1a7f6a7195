from functools import wraps
from flask import jsonify
from flask_jwt_extended import get_jwt, get_jwt_identity


def current_actor_id():
    """Identity of the verified token, or None outside a protected view."""
    try:
        identity = get_jwt_identity()
    except RuntimeError:
        return None
    return str(identity) if identity is not None else None


def roles_required(*allowed_roles):
    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            claims = get_jwt()

            if claims.get("role") not in allowed_roles:
                return jsonify({
                    "success": False,
                    "error": "Forbidden",
                    "message": "Insufficient permissions"
                }), 403

            return fn(*args, **kwargs)
        return wrapper
    return decorator

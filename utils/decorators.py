from __future__ import annotations
from functools import wraps
from flask import request, g

from api.extensions import get_services
from models.user import Role
from services.access import authenticate, authorize


def jwt_required():
    """
    Require a valid access token. Stores the caller in g.current_user_id and
    g.current_role; no database access.
    """
    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            principal = authenticate(request.headers.get("Authorization"), get_services().tokens)
            g.current_user_id = principal.user_id
            g.current_role = principal.role
            g.principal = principal
            return fn(*args, **kwargs)

        return wrapper

    return decorator


def roles_required(required_roles: list[Role]):
    """
    Allow access if the caller's role is one of required_roles,
    otherwise Forbidden (403). Implies jwt_required().
    """
    allowed = frozenset(required_roles or [])

    def decorator(fn):
        @wraps(fn)
        @jwt_required()
        def wrapper(*args, **kwargs):
            authorize(g.principal, allowed)
            return fn(*args, **kwargs)

        return wrapper

    return decorator

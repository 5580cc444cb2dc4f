"""Helpers shared by the Flask controllers: role guards and error mapping."""

from __future__ import annotations

import logging
from functools import wraps

from flask import jsonify, request, session

from ..core.enums import Role
from ..core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    NoActiveSessionError,
    NotFoundError,
    StoreUnavailableError,
    ValidationError,
)

logger = logging.getLogger(__name__)

RETRY_MESSAGE = "Service temporarily unavailable. Please try again."


def json_error(message: str, status: int, *, code: str | None = None):
    body = {"success": False, "message": message}
    if code:
        body["code"] = code
    return jsonify(body), status


def api_errors(view):
    """Map domain errors to short JSON messages; never leak internals."""

    @wraps(view)
    def wrapper(*args, **kwargs):
        try:
            return view(*args, **kwargs)
        except ValidationError as e:
            return json_error(str(e), 400, code="validation")
        except AuthenticationError as e:
            return json_error(str(e), 401, code="authentication")
        except AuthorizationError as e:
            return json_error(str(e), 403, code="forbidden")
        except NoActiveSessionError as e:
            return json_error(str(e), 404, code="no_active_session")
        except NotFoundError as e:
            return json_error(str(e), 404, code="not_found")
        except StoreUnavailableError:
            logger.warning("store unavailable during %s", view.__name__, exc_info=True)
            return json_error(RETRY_MESSAGE, 503, code="retry")
        except Exception:
            logger.exception("unexpected error in %s", view.__name__)
            return json_error("Internal error", 500, code="internal")

    return wrapper


def role_required(role: Role):
    def decorator(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            if "role" not in session:
                return json_error("Please sign in to continue", 401, code="authentication")
            if session.get("role") != role.value:
                return json_error("You do not have access to this page", 403, code="forbidden")
            return view(*args, **kwargs)

        return wrapper

    return decorator


admin_required = role_required(Role.ADMIN)
lecturer_required = role_required(Role.LECTURER)


def current_lecturer_id() -> str:
    return str(session["lecturer_id"])


def payload() -> dict:
    return request.get_json(silent=True) or {}

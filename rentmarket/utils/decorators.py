from functools import wraps

from flask import current_app, g, request

from rentmarket.exceptions import UnauthorizedError
from rentmarket.services.account_directory import AccountDirectory


def actor_required(fn):
    """
    Resolve the acting account from the X-Account-Id header into
    g.actor_id. Unknown or missing accounts get a 401.
    """
    @wraps(fn)
    def wrapper(*args, **kwargs):
        header = current_app.config.get("ACTOR_HEADER", "X-Account-Id")
        actor_id = (request.headers.get(header) or "").strip()
        if not actor_id or not AccountDirectory().exists(actor_id):
            raise UnauthorizedError("Please identify the acting account")
        g.actor_id = actor_id
        return fn(*args, **kwargs)

    return wrapper

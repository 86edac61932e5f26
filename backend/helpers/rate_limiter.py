"""Rate limiter shared by the admin and maintenance routers.

Lives outside main.py so routers can import it without a cycle.
"""

from slowapi import Limiter
from slowapi.util import get_remote_address
from starlette.requests import Request


def caller_or_address(request: Request) -> str:
    """
    Key requests by bearer token when present, else by client address.

    Moderators behind one NAT then get separate buckets.
    """
    authorization = request.headers.get("authorization", "")
    if authorization.lower().startswith("bearer ") and len(authorization) > 7:
        # Tail of the token is enough to tell callers apart
        return f"token:{authorization[-32:]}"
    return get_remote_address(request)


limiter = Limiter(key_func=caller_or_address)

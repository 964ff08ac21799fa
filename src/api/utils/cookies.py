"""
Session cookie helpers.

The cookie carries only the opaque session handle. Max-Age follows the idle
timeout and is refreshed on every authenticated request, so an idle browser
drops the cookie at the same time the server stops accepting it.
"""

from starlette.responses import Response


def set_session_cookie(response: Response, config, handle: str) -> None:
    response.set_cookie(
        config.SESSION_COOKIE_NAME,
        value=handle,
        max_age=int(config.SESSION_IDLE_TIMEOUT_MINUTES) * 60,
        httponly=True,
        secure=bool(config.SESSION_COOKIE_SECURE),
        samesite="lax",
        path="/",
    )


def clear_session_cookie(response: Response, config) -> None:
    response.delete_cookie(
        config.SESSION_COOKIE_NAME,
        httponly=True,
        secure=bool(config.SESSION_COOKIE_SECURE),
        samesite="lax",
        path="/",
    )

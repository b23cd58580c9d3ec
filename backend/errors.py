"""Translation of service failures into HTTP errors.

Remote failures are shown to the user as a short Korean prefix followed by
the backend's own message, verbatim.
"""

from fastapi import HTTPException

from backend.remote.base import RemoteError

BUSY_MESSAGE = "처리 중"


def remote_failure(prefix: str, exc: RemoteError) -> HTTPException:
    status = exc.status_code if exc.status_code and 400 <= exc.status_code < 500 else 502
    return HTTPException(status_code=status, detail=f"{prefix}: {exc.message}")


def busy() -> HTTPException:
    return HTTPException(status_code=409, detail=BUSY_MESSAGE)

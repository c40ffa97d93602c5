"""JSON envelope {status, data, message} and the mapping of use-case results onto it.

The envelope status is the outcome; the HTTP response itself is always 200.
"""

from collections.abc import Callable

from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from pingpal.application import Conflict, Done, Invalid, NotFound

STATUS_OK = 200
STATUS_NO_CONTENT = 204
STATUS_BAD_REQUEST = 400
STATUS_FORBIDDEN = 403
STATUS_NOT_FOUND = 404
STATUS_CONFLICT = 409
STATUS_ERROR = 500

_FAILURE_STATUSES = {
    Invalid: STATUS_BAD_REQUEST,
    NotFound: STATUS_NOT_FOUND,
    Conflict: STATUS_CONFLICT,
}


def make_response(status: int, data: object = None, message: str | None = None) -> JSONResponse:
    return JSONResponse(
        content=jsonable_encoder({"status": status, "message": message, "data": data})
    )


def respond(result: object, present: Callable[[object], object] | None = None) -> JSONResponse:
    """Envelope for a service result. present shapes successful payloads."""
    status = _FAILURE_STATUSES.get(type(result))
    if status is not None:
        return make_response(status, None, result.reason)
    if isinstance(result, Done):
        return make_response(STATUS_NO_CONTENT)
    return make_response(STATUS_OK, present(result) if present else result)

"""Shared plumbing for the REST API Lambda handlers.

Handlers receive API Gateway proxy events. The upstream authorizer places the
authenticated user id in ``requestContext.authorizer.userId``.
"""

import functools
import json
import logging
import uuid
from collections.abc import Callable
from typing import Any, TypeVar

import pydantic

from tripshare.config import get_config
from tripshare.db.engine import session_scope
from tripshare.errors import (
    AuthenticationError,
    CascadeFailureError,
    ConflictError,
    ErrorCode,
    NotFoundError,
    PermissionDeniedError,
    TripShareError,
    USER_MESSAGES,
    ValidationError,
)
from tripshare.services.sharing import SharingService

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=pydantic.BaseModel)

STATUS_CODES: dict[type[TripShareError], int] = {
    ValidationError: 400,
    AuthenticationError: 401,
    PermissionDeniedError: 403,
    NotFoundError: 404,
    ConflictError: 409,
    CascadeFailureError: 500,
}


def status_for(error: TripShareError) -> int:
    for error_cls, status in STATUS_CODES.items():
        if isinstance(error, error_cls):
            return status
    return 500


def respond(status: int, payload: Any = None) -> dict[str, Any]:
    if isinstance(payload, pydantic.BaseModel):
        payload = payload.model_dump(mode="json")
    elif isinstance(payload, list):
        payload = [p.model_dump(mode="json") if isinstance(p, pydantic.BaseModel) else p for p in payload]
    return {
        "statusCode": status,
        "headers": {"Content-Type": "application/json"},
        "body": json.dumps({"data": payload}),
    }


def error_response(error: TripShareError) -> dict[str, Any]:
    return {
        "statusCode": status_for(error),
        "headers": {"Content-Type": "application/json"},
        "body": json.dumps({"error": error.code.value, "message": error.user_message}),
    }


def actor_id(event: dict[str, Any]) -> uuid.UUID:
    authorizer = (event.get("requestContext") or {}).get("authorizer") or {}
    raw = authorizer.get("userId")
    if not raw:
        raise AuthenticationError("No authenticated user on request")
    try:
        return uuid.UUID(str(raw))
    except ValueError as e:
        raise AuthenticationError(f"Malformed authorizer userId {raw!r}") from e


def path_param(event: dict[str, Any], name: str) -> str:
    value = (event.get("pathParameters") or {}).get(name)
    if not value:
        raise ValidationError(f"Missing path parameter {name}", code=ErrorCode.INVALID_REQUEST)
    return value


def query_param(event: dict[str, Any], name: str) -> str:
    value = (event.get("queryStringParameters") or {}).get(name)
    if not value:
        raise ValidationError(f"Missing query parameter {name}", code=ErrorCode.INVALID_REQUEST)
    return value


def parse_body(event: dict[str, Any], model: type[M], **path_fields: Any) -> M:
    """Validate the JSON body into ``model``; ``path_fields`` override body keys."""
    try:
        data = json.loads(event.get("body") or "{}")
    except json.JSONDecodeError as e:
        raise ValidationError(f"Body is not valid JSON: {e}", code=ErrorCode.INVALID_REQUEST) from e
    if not isinstance(data, dict):
        raise ValidationError("Body must be a JSON object", code=ErrorCode.INVALID_REQUEST)
    try:
        return model.model_validate({**data, **path_fields})
    except pydantic.ValidationError as e:
        raise ValidationError(f"Invalid {model.__name__}: {e}", code=ErrorCode.INVALID_REQUEST) from e


def api_handler(
    func: Callable[[dict[str, Any], SharingService, uuid.UUID], dict[str, Any]],
) -> Callable[[dict[str, Any], object], dict[str, Any]]:
    """Open a request-scoped session, run ``func`` and translate typed errors."""

    @functools.wraps(func)
    def wrapper(event: dict[str, Any], context: object) -> dict[str, Any]:
        logging.getLogger().setLevel(get_config().log_level)
        try:
            user_id = actor_id(event)
            with session_scope() as session:
                return func(event, SharingService.from_session(session), user_id)
        except TripShareError as e:
            log = logger.warning if status_for(e) < 500 else logger.error
            log("%s %s failed: %s (%s)", event.get("httpMethod"), event.get("resource"), e.message, e.code.value)
            return error_response(e)
        except Exception:
            logger.exception("Unhandled error on %s %s", event.get("httpMethod"), event.get("resource"))
            return {
                "statusCode": 500,
                "headers": {"Content-Type": "application/json"},
                "body": json.dumps(
                    {"error": ErrorCode.INTERNAL_ERROR.value, "message": USER_MESSAGES[ErrorCode.INTERNAL_ERROR]}
                ),
            }

    return wrapper

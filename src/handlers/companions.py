"""REST handler for /companions."""

from typing import Any

from handlers.http import api_handler, parse_body, path_param, respond
from tripshare.errors import ErrorCode, ValidationError
from tripshare.models.sharing import AddCompanionRequest, UpdateCompanionRequest
from tripshare.services.sharing import SharingService
from tripshare.services.validation import coerce_uuid


@api_handler
def handler(event: dict[str, Any], service: SharingService, user_id) -> dict[str, Any]:
    method = event.get("httpMethod")
    resource = event.get("resource", "")

    if method == "POST" and resource == "/companions":
        body = parse_body(event, AddCompanionRequest)
        return respond(201, service.add_companion(user_id, body.companion, body.permission_level))

    if method == "GET" and resource == "/companions":
        return respond(200, service.list_companions(user_id))

    if method == "GET" and resource == "/companions/received":
        return respond(200, service.list_received(user_id))

    if resource == "/companions/{companionUserId}":
        companion_user_id = coerce_uuid(path_param(event, "companionUserId"), "companionUserId")
        if method == "PUT":
            body = parse_body(event, UpdateCompanionRequest, companion_user_id=companion_user_id)
            return respond(200, service.update_companion(user_id, companion_user_id, body.permission_level))
        if method == "DELETE":
            return respond(200, service.remove_companion(user_id, companion_user_id))

    raise ValidationError(f"Unsupported route {method} {resource}", code=ErrorCode.INVALID_REQUEST)

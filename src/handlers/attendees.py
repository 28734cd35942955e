"""REST handler for /attendees."""

from typing import Any

from handlers.http import api_handler, parse_body, path_param, query_param, respond
from tripshare.errors import ErrorCode, ValidationError
from tripshare.models.sharing import AddAttendeeRequest, UpdateAttendeeRequest
from tripshare.services.sharing import SharingService
from tripshare.services.validation import coerce_uuid


@api_handler
def handler(event: dict[str, Any], service: SharingService, user_id) -> dict[str, Any]:
    method = event.get("httpMethod")
    resource = event.get("resource", "")

    if method == "POST" and resource == "/attendees":
        body = parse_body(event, AddAttendeeRequest)
        attendee = service.add_attendee(user_id, body.user, body.item_type, body.item_id, body.permission_level)
        return respond(201, attendee)

    if method == "GET" and resource == "/attendees":
        attendees = service.list_attendees(user_id, query_param(event, "itemType"), query_param(event, "itemId"))
        return respond(200, attendees)

    if resource == "/attendees/{attendeeId}":
        attendee_id = coerce_uuid(path_param(event, "attendeeId"), "attendeeId")
        if method == "PUT":
            body = parse_body(event, UpdateAttendeeRequest)
            return respond(200, service.update_attendee(user_id, attendee_id, body.permission_level))
        if method == "DELETE":
            return respond(200, service.remove_attendee(user_id, attendee_id))

    raise ValidationError(f"Unsupported route {method} {resource}", code=ErrorCode.INVALID_REQUEST)

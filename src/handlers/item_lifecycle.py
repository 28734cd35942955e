"""Item lifecycle handler — runs cascades when item services emit lifecycle events.

Expects EventBridge events whose ``detail-type`` is one of TripCreated,
ItemCreated, ItemDeleted or TripDeleted. A CascadeFailureError is re-raised so
the event is retried; the rollback guarantees a retry starts from a clean state.
A redelivered TripCreated or ItemCreated is acknowledged as already applied.
"""

import logging
from typing import Any

import pydantic

from tripshare.db.engine import session_scope
from tripshare.errors import CascadeFailureError, ConflictError, ErrorCode, TripShareError, ValidationError
from tripshare.models.items import ItemRef
from tripshare.services.sharing import SharingService

logger = logging.getLogger(__name__)

# Creation events enroll the creator, so a redelivery hits the attendee unique key.
_REPLAYABLE = ("TripCreated", "ItemCreated")


def _dispatch(detail_type: str, detail: dict[str, Any], service: SharingService) -> dict[str, Any]:
    cascade = service.cascade

    if detail_type == "TripCreated":
        cascade.on_trip_created(detail["tripId"], detail["creatorId"])
        return {"enrolled": 1}

    if detail_type == "ItemCreated":
        summary = cascade.on_item_created(detail.get("tripId"), detail["itemType"], detail["itemId"], detail["creatorId"])
        return summary.model_dump(mode="json")

    if detail_type == "ItemDeleted":
        return {"removed": cascade.on_item_deleted(detail["itemType"], detail["itemId"])}

    if detail_type == "TripDeleted":
        children = detail.get("children")
        if children is not None:
            children = [ItemRef(item_type=c["itemType"], item_id=c["itemId"]) for c in children]
        return cascade.on_trip_deleted(detail["tripId"], children).model_dump(mode="json")

    raise ValidationError(f"Unknown lifecycle event {detail_type!r}", code=ErrorCode.INVALID_REQUEST)


def handler(event: dict[str, Any], context: object) -> dict[str, Any]:
    detail_type = event.get("detail-type", "")
    detail = event.get("detail") or {}

    try:
        with session_scope() as session:
            result = _dispatch(detail_type, detail, SharingService.from_session(session))
    except CascadeFailureError:
        raise
    except ConflictError as e:
        if detail_type not in _REPLAYABLE:
            logger.error("Lifecycle event %s rejected: %s (%s)", detail_type, e.message, e.code.value)
            return {"statusCode": 400, "body": e.code.value}
        logger.info("Lifecycle event %s already applied: %s", detail_type, e.message)
        return {"statusCode": 200, "body": {"already_applied": True}}
    except (KeyError, pydantic.ValidationError) as e:
        logger.error("Lifecycle event %s malformed: %s", detail_type, e)
        return {"statusCode": 400, "body": ErrorCode.INVALID_REQUEST.value}
    except TripShareError as e:
        logger.error("Lifecycle event %s rejected: %s (%s)", detail_type, e.message, e.code.value)
        return {"statusCode": 400, "body": e.code.value}

    logger.info("Lifecycle event %s applied: %s", detail_type, result)
    return {"statusCode": 200, "body": result}

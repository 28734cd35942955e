"""Migrate Lambda — applies Alembic revisions for the sharing schema."""

import logging
from typing import Any

from tripshare.services.migration import run_migrations

logger = logging.getLogger(__name__)


def handler(event: dict[str, Any], context: object) -> dict[str, Any]:
    event = event or {}
    revision = event.get("revision", "head")
    result = run_migrations(revision=revision, downgrade=bool(event.get("downgrade", False)))
    logger.info("Schema now at %s", revision)
    return {"statusCode": 200, "body": result}

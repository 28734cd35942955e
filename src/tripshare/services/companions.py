"""Companion store — bidirectional, cross-trip relationships between two users.

Each direction is its own row and each user controls only their outbound
edge. Adding A -> B also creates B -> A at level "none" when B has no edge
back yet; that reverse edge is never granted anything automatically.

Removing A -> B deletes A's edge only. B -> A is owned by B and survives,
so B keeps whatever they granted A until B removes it.
"""

import logging
import uuid

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from tripshare.db.schemas.companion import Companion
from tripshare.db.session import atomic
from tripshare.errors import ConflictError, ErrorCode, NotFoundError, ValidationError
from tripshare.models.permissions import CompanionLevel
from tripshare.services.validation import coerce_enum, coerce_uuid

logger = logging.getLogger(__name__)


class CompanionStore:
    def __init__(self, session: Session) -> None:
        self._session = session

    def get_edge(self, owner_id: uuid.UUID, companion_user_id: uuid.UUID) -> Companion | None:
        return self._session.execute(
            select(Companion).where(
                Companion.user_id == owner_id,
                Companion.companion_user_id == companion_user_id,
            )
        ).scalar_one_or_none()

    def add_companion(self, owner_id: uuid.UUID, companion_user_id: uuid.UUID, level: CompanionLevel | str) -> Companion:
        """Create owner -> companion at ``level`` plus the "none" reverse edge if absent."""
        owner_id = coerce_uuid(owner_id, "owner_id")
        companion_user_id = coerce_uuid(companion_user_id, "companion_user_id")
        level = coerce_enum(level, CompanionLevel, ErrorCode.INVALID_PERMISSION_LEVEL)
        if owner_id == companion_user_id:
            raise ValidationError("Cannot add yourself as a companion", code=ErrorCode.SELF_COMPANION)

        with atomic(self._session):
            if self.get_edge(owner_id, companion_user_id) is not None:
                raise ConflictError(
                    f"Companion edge {owner_id} -> {companion_user_id} already exists",
                    code=ErrorCode.COMPANION_EXISTS,
                )

            forward = Companion(user_id=owner_id, companion_user_id=companion_user_id, permission_level=level.value)
            rows = [forward]
            if self.get_edge(companion_user_id, owner_id) is None:
                rows.append(
                    Companion(
                        user_id=companion_user_id,
                        companion_user_id=owner_id,
                        permission_level=CompanionLevel.NONE.value,
                    )
                )

            # Insert in ascending user_id order so two opposite-direction adds
            # contend on the same unique key first instead of deadlocking.
            for row in sorted(rows, key=lambda r: r.user_id):
                self._session.add(row)
                try:
                    self._session.flush()
                except IntegrityError as e:
                    raise ConflictError(
                        f"Companion pair {owner_id} / {companion_user_id} was created concurrently",
                        code=ErrorCode.COMPANION_EXISTS,
                    ) from e

        logger.info(
            "Companion added %s -> %s (%s), reverse edge %s",
            owner_id,
            companion_user_id,
            level.value,
            "created" if len(rows) == 2 else "kept",
        )
        return forward

    def update_companion_level(
        self, owner_id: uuid.UUID, companion_user_id: uuid.UUID, level: CompanionLevel | str
    ) -> Companion:
        """Change the owner's outbound edge only; the reverse edge is never touched."""
        level = coerce_enum(level, CompanionLevel, ErrorCode.INVALID_PERMISSION_LEVEL)
        with atomic(self._session):
            edge = self._require_edge(owner_id, companion_user_id)
            edge.permission_level = level.value
            self._session.flush()

        logger.info("Companion level %s -> %s set to %s", owner_id, companion_user_id, level.value)
        return edge

    def remove_companion(self, owner_id: uuid.UUID, companion_user_id: uuid.UUID) -> Companion:
        """Delete the owner's outbound edge and return it. The reverse edge survives."""
        with atomic(self._session):
            edge = self._require_edge(owner_id, companion_user_id)
            self._session.delete(edge)
            self._session.flush()

        logger.info("Companion removed %s -> %s", owner_id, companion_user_id)
        return edge

    def get_outbound_level(self, owner_id: uuid.UUID, companion_user_id: uuid.UUID) -> CompanionLevel:
        """What ``owner_id`` granted ``companion_user_id``; "none" when there is no edge."""
        level = self._session.execute(
            select(Companion.permission_level).where(
                Companion.user_id == owner_id,
                Companion.companion_user_id == companion_user_id,
            )
        ).scalar_one_or_none()
        return CompanionLevel(level) if level else CompanionLevel.NONE

    def list_companions(self, user_id: uuid.UUID) -> list[Companion]:
        """Edges owned by ``user_id``, newest first."""
        return list(
            self._session.execute(
                select(Companion)
                .where(Companion.user_id == user_id)
                .order_by(Companion.created_at.desc(), Companion.id)
            ).scalars()
        )

    def list_received(self, user_id: uuid.UUID) -> list[Companion]:
        """Edges other users own that point at ``user_id``, newest first."""
        return list(
            self._session.execute(
                select(Companion)
                .where(Companion.companion_user_id == user_id)
                .order_by(Companion.created_at.desc(), Companion.id)
            ).scalars()
        )

    def reverse_levels(self, user_id: uuid.UUID, companion_user_ids: list[uuid.UUID]) -> dict[uuid.UUID, CompanionLevel]:
        """Levels each listed companion granted back to ``user_id``."""
        if not companion_user_ids:
            return {}
        rows = self._session.execute(
            select(Companion.user_id, Companion.permission_level).where(
                Companion.user_id.in_(companion_user_ids),
                Companion.companion_user_id == user_id,
            )
        ).all()
        return {row.user_id: CompanionLevel(row.permission_level) for row in rows}

    def _require_edge(self, owner_id: uuid.UUID, companion_user_id: uuid.UUID) -> Companion:
        edge = self.get_edge(coerce_uuid(owner_id, "owner_id"), coerce_uuid(companion_user_id, "companion_user_id"))
        if edge is None:
            raise NotFoundError(
                f"No companion edge {owner_id} -> {companion_user_id}",
                code=ErrorCode.COMPANION_NOT_FOUND,
            )
        return edge

"""Read-only views over tables owned by collaborating services.

Users and travel items are created, updated and deleted elsewhere. Sharing
only needs to resolve a user identifier and to read an item's creator, owner
and parent trip, so these directories never write.
"""

import uuid
from typing import Protocol

from sqlalchemy import Uuid, column, select, table
from sqlalchemy.orm import Session

from tripshare.models.items import ITEM_CLASSES
from tripshare.models.permissions import CHILD_ITEM_TYPES, ItemType


class UserDirectory(Protocol):
    def resolve(self, identifier: str) -> uuid.UUID | None: ...


class ItemDirectory(Protocol):
    def get(self, item_type: ItemType, item_id: uuid.UUID): ...

    def children_of(self, trip_id: uuid.UUID) -> list: ...


ITEM_TABLES: dict[ItemType, str] = {
    ItemType.TRIP: "trips",
    ItemType.FLIGHT: "flights",
    ItemType.HOTEL: "hotels",
    ItemType.EVENT: "events",
    ItemType.TRANSPORTATION: "transportation",
    ItemType.CAR_RENTAL: "car_rentals",
}

_users = table(
    "users",
    column("id", Uuid()),
    column("email"),
    column("phone"),
)


def _item_table(item_type: ItemType):
    columns = [column("id", Uuid()), column("user_id", Uuid()), column("created_by", Uuid())]
    if item_type is not ItemType.TRIP:
        columns.append(column("trip_id", Uuid()))
    return table(ITEM_TABLES[item_type], *columns)


def normalize_identifier(identifier: str) -> str:
    return identifier.strip().lower()


class SqlUserDirectory:
    def __init__(self, session: Session) -> None:
        self._session = session

    def resolve(self, identifier: str) -> uuid.UUID | None:
        """Find a user by id, email or phone number."""
        normalized = normalize_identifier(identifier)
        if not normalized:
            return None

        try:
            user_id = uuid.UUID(normalized)
        except ValueError:
            where = _users.c.email == normalized if "@" in normalized else _users.c.phone == normalized
        else:
            where = _users.c.id == user_id

        return self._session.execute(select(_users.c.id).where(where)).scalar_one_or_none()


class SqlItemDirectory:
    def __init__(self, session: Session) -> None:
        self._session = session
        self._tables = {item_type: _item_table(item_type) for item_type in ItemType}

    def get(self, item_type: ItemType, item_id: uuid.UUID):
        tbl = self._tables[item_type]
        row = self._session.execute(select(tbl).where(tbl.c.id == item_id)).mappings().one_or_none()
        if row is None:
            return None
        return self._to_item(item_type, row)

    def children_of(self, trip_id: uuid.UUID) -> list:
        """All child items of a trip, grouped by kind in registry order."""
        children = []
        for item_type in CHILD_ITEM_TYPES:
            tbl = self._tables[item_type]
            rows = self._session.execute(select(tbl).where(tbl.c.trip_id == trip_id)).mappings().all()
            children.extend(self._to_item(item_type, row) for row in rows)
        return children

    @staticmethod
    def _to_item(item_type: ItemType, row):
        fields = {"item_id": row["id"], "created_by": row["created_by"], "user_id": row["user_id"]}
        if item_type is not ItemType.TRIP:
            fields["trip_id"] = row["trip_id"]
        return ITEM_CLASSES[item_type](**fields)

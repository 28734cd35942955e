"""Travel items as a tagged union over the closed set of item kinds.

Items are owned by the item-management services; this package only reads the
fields that matter for sharing: who created it, who owns it now, and which
trip (if any) it belongs to.
"""

from typing import Annotated, Literal, Union
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

from tripshare.models.permissions import ItemType


class ItemRef(BaseModel):
    """Key of a trip or item in the attendee table."""

    model_config = ConfigDict(frozen=True)

    item_type: ItemType
    item_id: UUID

    @property
    def kind(self) -> ItemType:
        return self.item_type


class _TravelItem(BaseModel):
    model_config = ConfigDict(frozen=True)

    item_id: UUID
    created_by: UUID
    user_id: UUID | None = None

    @property
    def kind(self) -> ItemType:
        return ItemType(self.item_type)  # type: ignore[attr-defined]

    @property
    def ref(self) -> ItemRef:
        return ItemRef(item_type=self.kind, item_id=self.item_id)

    @property
    def owner_user_id(self) -> UUID:
        return self.user_id or self.created_by


class Trip(_TravelItem):
    item_type: Literal["trip"] = "trip"

    @property
    def trip_id(self) -> None:
        return None


class _TripChild(_TravelItem):
    trip_id: UUID | None = None


class Flight(_TripChild):
    item_type: Literal["flight"] = "flight"


class Hotel(_TripChild):
    item_type: Literal["hotel"] = "hotel"


class Event(_TripChild):
    item_type: Literal["event"] = "event"


class Transportation(_TripChild):
    item_type: Literal["transportation"] = "transportation"


class CarRental(_TripChild):
    item_type: Literal["car_rental"] = "car_rental"


TravelItem = Annotated[
    Union[Trip, Flight, Hotel, Event, Transportation, CarRental],
    Field(discriminator="item_type"),
]

ITEM_CLASSES: dict[ItemType, type[_TravelItem]] = {
    ItemType.TRIP: Trip,
    ItemType.FLIGHT: Flight,
    ItemType.HOTEL: Hotel,
    ItemType.EVENT: Event,
    ItemType.TRANSPORTATION: Transportation,
    ItemType.CAR_RENTAL: CarRental,
}

_travel_item_adapter: TypeAdapter = TypeAdapter(TravelItem)


def parse_item(data: dict) -> "Trip | Flight | Hotel | Event | Transportation | CarRental":
    """Validate a raw mapping into the matching item class by its item_type."""
    return _travel_item_adapter.validate_python(data)

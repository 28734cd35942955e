"""Shared test fixtures for Trip Share."""

import os
import sys
import uuid
from pathlib import Path

import pytest
from dotenv import load_dotenv
from sqlalchemy import Column, MetaData, String, Table, Uuid, create_engine, insert
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

# Load .env file for test configuration
load_dotenv()

# Unset AWS_PROFILE for local testing (no AWS calls are made in unit tests)
if "AWS_PROFILE" in os.environ:
    del os.environ["AWS_PROFILE"]

# Add src directory to Python path for imports
src_path = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(src_path))

from tripshare.db.directory import ITEM_TABLES  # noqa: E402
from tripshare.db.schemas.base import Base  # noqa: E402
from tripshare.models.items import ITEM_CLASSES  # noqa: E402
from tripshare.models.permissions import ItemType  # noqa: E402

# Tables owned by the user and item services. Sharing only reads them.
collaborator_metadata = MetaData()
users_table = Table(
    "users",
    collaborator_metadata,
    Column("id", Uuid, primary_key=True),
    Column("email", String(255)),
    Column("phone", String(32)),
)
item_tables = {
    item_type: Table(
        name,
        collaborator_metadata,
        Column("id", Uuid, primary_key=True),
        Column("user_id", Uuid),
        Column("created_by", Uuid, nullable=False),
        *([] if item_type is ItemType.TRIP else [Column("trip_id", Uuid)]),
    )
    for item_type, name in ITEM_TABLES.items()
}


class World:
    """Seeds users and travel items into the collaborator tables."""

    def __init__(self, session) -> None:
        self.session = session
        self._count = 0

    def user(self, email: str | None = None, phone: str | None = None) -> uuid.UUID:
        self._count += 1
        user_id = uuid.uuid4()
        self.session.execute(
            insert(users_table).values(id=user_id, email=email or f"user{self._count}@example.com", phone=phone)
        )
        self.session.commit()
        return user_id

    def trip(self, creator: uuid.UUID, owner: uuid.UUID | None = None):
        return self.item(ItemType.TRIP, creator, owner=owner)

    def item(self, item_type: ItemType, creator: uuid.UUID, trip=None, owner: uuid.UUID | None = None):
        item_id = uuid.uuid4()
        values = {"id": item_id, "created_by": creator, "user_id": owner or creator}
        fields = {"item_id": item_id, "created_by": creator, "user_id": owner or creator}
        if item_type is not ItemType.TRIP:
            values["trip_id"] = trip.item_id if trip is not None else None
            fields["trip_id"] = values["trip_id"]
        self.session.execute(insert(item_tables[item_type]).values(**values))
        self.session.commit()
        return ITEM_CLASSES[item_type](**fields)


@pytest.fixture
def engine():
    """In-memory SQLite engine shared by every session in one test."""
    engine = create_engine("sqlite://", poolclass=StaticPool, connect_args={"check_same_thread": False})
    Base.metadata.create_all(engine)
    collaborator_metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session(engine):
    session = sessionmaker(bind=engine, expire_on_commit=False)()
    yield session
    session.rollback()
    session.close()


@pytest.fixture
def world(session):
    return World(session)


# PostgreSQL fixtures
@pytest.fixture
def pg_connection():
    """Provide a PostgreSQL connection for integration tests."""
    import psycopg
    from tripshare.config import get_config

    config = get_config()
    conn_str = (
        f"host={config.aurora_host} port={config.aurora_port} "
        f"dbname={config.aurora_database} user={config.aurora_user} "
        f"password={config.aurora_password}"
    )

    conn = psycopg.connect(conn_str)
    yield conn

    # Rollback any uncommitted changes
    conn.rollback()
    conn.close()

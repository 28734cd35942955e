"""Aurora PostgreSQL engine — connection management and request-scoped sessions."""

import json
import logging
from collections.abc import Iterator
from contextlib import contextmanager
from functools import lru_cache

import boto3
from sqlalchemy import Engine, create_engine, text
from sqlalchemy.engine import URL
from sqlalchemy.orm import Session, sessionmaker

from tripshare.config import Config, get_config

logger = logging.getLogger(__name__)


def _get_credentials(config: Config) -> dict[str, str]:
    if config.aurora_secret_arn:
        client = boto3.client("secretsmanager", region_name=config.aws_region)
        secret = client.get_secret_value(SecretId=config.aurora_secret_arn)
        return json.loads(secret["SecretString"])
    return {
        "host": config.aurora_host,
        "port": str(config.aurora_port),
        "dbname": config.aurora_database,
        "user": config.aurora_user,
        "password": config.aurora_password,
    }


def build_url(config: Config) -> URL | str:
    if config.database_url:
        return config.database_url

    creds = _get_credentials(config)
    return URL.create(
        "postgresql+psycopg",
        host=creds.get("host", config.aurora_host),
        port=int(creds.get("port", config.aurora_port)),
        database=creds.get("dbname", config.aurora_database),
        username=creds.get("username", creds.get("user", config.aurora_user)),
        password=creds.get("password", config.aurora_password),
    )


@lru_cache(maxsize=1)
def get_engine() -> Engine:
    """Engine reused across warm Lambda invocations."""
    config = get_config()
    return create_engine(build_url(config), echo=config.db_echo, pool_pre_ping=True)


@lru_cache(maxsize=1)
def get_session_factory() -> sessionmaker[Session]:
    return sessionmaker(bind=get_engine(), expire_on_commit=False)


@contextmanager
def session_scope() -> Iterator[Session]:
    """Request-scoped session. Uncommitted work is rolled back on exit."""
    session = get_session_factory()()
    try:
        yield session
    finally:
        session.rollback()
        session.close()


def health_check(engine: Engine | None = None) -> bool:
    try:
        with (engine or get_engine()).connect() as conn:
            conn.execute(text("SELECT 1"))
        return True
    except Exception:
        logger.exception("Database health check failed")
        return False

from os import environ

from pydantic import BaseModel, ConfigDict


def _as_bool(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")


class Config(BaseModel):
    model_config = ConfigDict(frozen=True)

    aws_region: str
    aurora_host: str
    aurora_port: int
    aurora_database: str
    aurora_user: str
    aurora_password: str
    aurora_secret_arn: str | None = None
    database_url: str | None = None
    db_echo: bool = False
    log_level: str = "INFO"
    environment: str


_cached_config: Config | None = None


def _reset_config() -> None:
    """Reset cached config — for testing only."""
    global _cached_config
    _cached_config = None


def get_config() -> Config:
    global _cached_config
    if _cached_config is not None:
        return _cached_config

    _cached_config = Config(
        aws_region=environ.get("AWS_REGION", "us-east-1"),
        aurora_host=environ.get("AURORA_HOST", "localhost"),
        aurora_port=int(environ.get("AURORA_PORT", "5432")),
        aurora_database=environ.get("AURORA_DATABASE", "tripshare"),
        aurora_user=environ.get("AURORA_USER", "tripshare"),
        aurora_password=environ.get("AURORA_PASSWORD", "localdev"),
        aurora_secret_arn=environ.get("AURORA_SECRET_ARN"),
        database_url=environ.get("DATABASE_URL"),
        db_echo=_as_bool(environ.get("DB_ECHO", "false")),
        log_level=environ.get("LOG_LEVEL", "INFO").upper(),
        environment=environ.get("ENVIRONMENT", "local"),
    )
    return _cached_config

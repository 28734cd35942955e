"""Run Alembic migrations programmatically — invoked via the migrate Lambda."""

import io
import logging
import os

from alembic.config import Config

from alembic import command

logger = logging.getLogger(__name__)


def run_migrations(revision: str = "head", downgrade: bool = False) -> dict[str, str]:
    """Upgrade (or downgrade) the sharing schema to ``revision``.

    Credentials come from ``alembic/env.py``, which builds the URL with
    ``tripshare.db.engine.build_url`` and so reads AURORA_SECRET_ARN itself.
    """
    ini_path = os.environ.get("ALEMBIC_CONFIG", "/var/task/alembic.ini")
    cfg = Config(ini_path)
    cfg.set_main_option("script_location", os.path.join(os.path.dirname(ini_path), "alembic"))

    stderr_buf = io.StringIO()
    stream_handler = logging.StreamHandler(stderr_buf)
    alembic_logger = logging.getLogger("alembic")
    alembic_logger.addHandler(stream_handler)

    try:
        if downgrade:
            command.downgrade(cfg, revision)
        else:
            command.upgrade(cfg, revision)
        output = stderr_buf.getvalue()
        logger.info("Migration to %s complete: %s", revision, output)
        return {"status": "success", "revision": revision, "output": output}
    except Exception as e:
        logger.error("Migration to %s failed: %s", revision, e)
        raise
    finally:
        alembic_logger.removeHandler(stream_handler)

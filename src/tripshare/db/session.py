"""Re-entrant unit of work on top of a SQLAlchemy session."""

from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy.orm import Session

_DEPTH_KEY = "tripshare.atomic_depth"


@contextmanager
def atomic(session: Session) -> Iterator[Session]:
    """Run the block as one all-or-nothing unit.

    The outermost ``atomic`` commits when its block exits cleanly and rolls
    back on any exception. Nested blocks join the outer unit and neither
    commit nor roll back on their own, so a store mutation called from inside
    a cascade is committed together with the rest of the cascade.
    """
    depth = session.info.get(_DEPTH_KEY, 0)
    session.info[_DEPTH_KEY] = depth + 1
    try:
        yield session
        if depth == 0:
            session.commit()
    except Exception:
        if depth == 0:
            session.rollback()
        raise
    finally:
        session.info[_DEPTH_KEY] = depth


def in_atomic(session: Session) -> bool:
    return session.info.get(_DEPTH_KEY, 0) > 0

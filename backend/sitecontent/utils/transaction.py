import logging
from contextlib import contextmanager

from sitecontent.extensions import db

logger = logging.getLogger(__name__)


@contextmanager
def transactional(label: str = "write"):
    """
    Run a unit of work on the shared session.

    Commits when the block exits cleanly. Any failure, the commit
    included, rolls the session back and is re-raised to the caller.
    """
    try:
        yield db.session
        db.session.commit()
    except Exception as exc:
        db.session.rollback()
        logger.debug(f"[STORE] {label} rolled back: {type(exc).__name__}")
        raise

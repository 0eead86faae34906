from __future__ import annotations

import logging

from sqlalchemy.engine import Engine
from sqlalchemy.exc import OperationalError

from core.database import ENGINE, is_transient_db_connectivity_error
from models import Base


logger = logging.getLogger(__name__)


def ensure_schema(engine: Engine | None = None) -> bool:
    """Create any missing tables. Safe to run on every startup.

    Returns False (and logs) when the database is unreachable, so the API can
    still start and report ``database: down`` from /health.
    """

    try:
        Base.metadata.create_all(bind=engine or ENGINE)
    except OperationalError as exc:
        if not is_transient_db_connectivity_error(exc):
            raise
        logger.warning("Schema bootstrap skipped: database unreachable", exc_info=exc)
        return False
    return True

from __future__ import annotations

import logging
import logging.handlers
from pathlib import Path

from core.config import BACKEND_DIR


_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"


def setup_logging(*, environment: str, log_dir: Path | None = None) -> None:
    """Configure application logging.

    - Dev: console logs, DEBUG level (draft transitions are visible).
    - Prod: console + rotating file logs under ``log_dir`` (default backend/logs), INFO level.

    Safe to call multiple times (won't double-add handlers).
    """

    root = logging.getLogger()
    if root.handlers:
        return

    env = (environment or "development").lower().strip()
    is_production = env == "production"
    level = logging.INFO if is_production else logging.DEBUG

    formatter = logging.Formatter(fmt=_FORMAT, datefmt="%Y-%m-%dT%H:%M:%S%z")

    console = logging.StreamHandler()
    console.setLevel(level)
    console.setFormatter(formatter)
    handlers: list[logging.Handler] = [console]

    if is_production:
        logs_dir = Path(log_dir) if log_dir is not None else Path(BACKEND_DIR) / "logs"
        logs_dir.mkdir(parents=True, exist_ok=True)

        file_handler = logging.handlers.RotatingFileHandler(
            logs_dir / "app.log",
            maxBytes=10 * 1024 * 1024,
            backupCount=5,
            encoding="utf-8",
        )
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        handlers.append(file_handler)

    logging.basicConfig(level=level, handlers=handlers)

    for name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
        logging.getLogger(name).setLevel(level)

    # Malformed catalogue times are logged per record at DEBUG; too noisy for prod.
    logging.getLogger("scheduling.timeutils").setLevel(logging.INFO if is_production else logging.DEBUG)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)

from __future__ import annotations

import logging
import os

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def setup_logging(level: str | None = None) -> None:
    name = (level or os.getenv("LOG_LEVEL") or "INFO").upper()
    logging.basicConfig(level=getattr(logging, name, logging.INFO), format=LOG_FORMAT)
    # uvicorn's access log repeats every request at INFO.
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)

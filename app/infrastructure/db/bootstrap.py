from __future__ import annotations

import logging

from app.infrastructure.db.engine import create_schema, get_engine
from app.shared.config import get_settings, validate_settings
from app.shared.logging import setup_logging


logger = logging.getLogger(__name__)


def main() -> None:
    settings = get_settings()
    validate_settings(settings)
    setup_logging(settings.log_level)

    engine = get_engine(settings.postgres_dsn, settings.db_pool_min, settings.db_pool_max)
    create_schema(engine)
    logger.info("bootstrap: schema_ready tables=users,refresh_tokens")


if __name__ == "__main__":
    main()

import asyncio
import logging

import config
from utils.config_validator import validate_or_exit
from utils.logging_config import setup_logging

# Initialize centralized logging configuration
setup_logging()

# Silence SQL loggers, statements clutter the order logs
for logger_name in ['aiosqlite', 'sqlalchemy', 'sqlalchemy.engine', 'sqlalchemy.pool', 'sqlalchemy.orm']:
    sql_logger = logging.getLogger(logger_name)
    sql_logger.setLevel(logging.CRITICAL)
    sql_logger.propagate = False

from db import create_db_and_tables


async def startup():
    """
    Prepare the storefront backend: validate config and create missing tables.

    Web handlers import the services directly; this entry point only brings the
    database into a usable state.
    """
    validate_or_exit(config)
    await create_db_and_tables()
    logging.info(
        f"Storefront ready: env={config.RUNTIME_ENVIRONMENT.value}, currency={config.CURRENCY.value}, "
        f"service area={config.SERVICE_AREA_STATE}/{config.SERVICE_AREA_PINCODE_PREFIX}*"
    )


if __name__ == '__main__':
    asyncio.run(startup())

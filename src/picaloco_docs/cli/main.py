import logging
import sys

import uvicorn
from dotenv import load_dotenv

from picaloco_docs.app import create_app
from picaloco_docs.config import ConfigMissingError, load_config
from picaloco_docs.logging_config import configure_logging

logger = logging.getLogger(__name__)


def main():
    load_dotenv()
    configure_logging()

    try:
        config = load_config()
    except ConfigMissingError as e:
        logger.error(str(e))
        sys.exit(1)

    logger.info(f"SUPABASE_URL: Set, SUPABASE_ANON_KEY: Set (length: {len(config.supabase_anon_key)})")

    logger.info(f"Pica Loco API Documentation running on port {config.port}")
    logger.info(f"Visit: http://localhost:{config.port}/docs")
    logger.info(f"Debug info: http://localhost:{config.port}/debug")

    uvicorn.run(
        create_app(config),
        host=config.host,
        port=config.port,
    )


if __name__ == "__main__":
    main()

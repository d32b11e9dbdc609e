import sys
import logging
from aiohttp import web
from dotenv import load_dotenv

from repo_badge.api.app import create_app
from repo_badge.config import load_settings
from repo_badge.domain.exceptions import ConfigException

logger = logging.getLogger(__name__)

def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s [%(levelname)s] %(message)s",
        handlers=[
            logging.StreamHandler(sys.stdout)
        ]
    )

def main() -> None:
    # Load environment variables from .env file
    load_dotenv()

    try:
        settings = load_settings()
    except ConfigException as e:
        configure_logging()
        logger.error(str(e))
        sys.exit(1)

    configure_logging(settings.log_level)

    app = create_app(settings)
    logger.info(f"GitHub badge generator running on http://{settings.host}:{settings.port}/b")
    web.run_app(app, host=settings.host, port=settings.port, print=None)

if __name__ == "__main__":
    main()

import logging
import sys

from app import create_app, ensure_env_loaded
from config.settings import ConfigurationError, get_settings

HOST = "0.0.0.0"
PORT = 8080
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

ensure_env_loaded()
logger = logging.getLogger(__name__)

try:
    settings = get_settings()
    logging.basicConfig(level=settings.LOG_LEVEL, format=LOG_FORMAT)
    app = create_app()
except ConfigurationError as exc:
    logging.basicConfig(format=LOG_FORMAT)
    logger.critical("%s", exc)
    sys.exit(1)

if __name__ == "__main__":
    logger.info("Server starting on :%s", PORT)
    try:
        app.run(host=HOST, port=PORT)
    finally:
        worker = app.extensions.get("job_worker")
        if worker is not None:
            worker.stop(timeout=1.0)

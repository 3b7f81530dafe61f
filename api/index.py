import logging

from movie_service.main import app

# Setup basic logging to capture errors in the platform logs
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

logger.info("Movie service api/index.py initialized")

# Deployment entry point: exports the FastAPI app instance

import logging
from movie_discovery.main import app

# Setup basic logging so TMDb and persistence warnings reach the Vercel logs
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

logger.info("Movie discovery api/index.py initialized")

# Entry point for Vercel Serverless Functions: exports the FastAPI app instance

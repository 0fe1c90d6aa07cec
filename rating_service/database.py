from fastapi import Depends, Request
from redis.asyncio import BlockingConnectionPool, Redis
import os
from dotenv import load_dotenv

from rating_service.service import LAST_WRITER_WINS, MatchService
from rating_service.store import RatingStore

load_dotenv()  # Optional if you're also running locally with a .env file

REDIS_URL = os.getenv("REDIS_URL", "redis://localhost:6379/0")
REDIS_MAX_CONNECTIONS = int(os.getenv("REDIS_MAX_CONNECTIONS", 10))
# Unset means a request waits for a free connection indefinitely
REDIS_POOL_TIMEOUT = float(os.environ["REDIS_POOL_TIMEOUT"]) if os.getenv("REDIS_POOL_TIMEOUT") else None
RATINGS_KEY = os.getenv("RATINGS_KEY", "elo")
RATING_CONSISTENCY = os.getenv("RATING_CONSISTENCY", LAST_WRITER_WINS)


def create_redis():
    """Build a client over a bounded pool; callers own closing it."""
    pool = BlockingConnectionPool.from_url(
        REDIS_URL,
        max_connections=REDIS_MAX_CONNECTIONS,
        timeout=REDIS_POOL_TIMEOUT,
        decode_responses=True,
    )
    return Redis(connection_pool=pool)


# ✅ Dependencies: the client lives on app.state and is passed down explicitly
def get_store(request: Request):
    return RatingStore(request.app.state.redis, key=RATINGS_KEY)


def get_service(store: RatingStore = Depends(get_store)):
    return MatchService(store, consistency=RATING_CONSISTENCY)

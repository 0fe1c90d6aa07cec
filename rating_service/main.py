from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.trustedhost import TrustedHostMiddleware
from fastapi.responses import JSONResponse
from redis.exceptions import RedisError
import uvicorn
import logging
from dotenv import load_dotenv

# ✅ Load environment variables
load_dotenv()

# ✅ Initialize FastAPI app with redirect_slashes=False to avoid automatic redirects
app = FastAPI(redirect_slashes=False)

# ✅ Allow all hosts (or specify your own domain)
app.add_middleware(TrustedHostMiddleware, allowed_hosts=["*"])

# ✅ Import internal modules
from rating_service.database import RATING_CONSISTENCY, create_redis
from rating_service.routers.players import router as players_router
from rating_service.routers.matches import router as matches_router
from rating_service.service import CONSISTENCY_MODES

# ✅ Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

# ✅ CORS configuration
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ✅ Health check
@app.get("/")
async def home():
    return {"message": "Rating service is running!"}


# ✅ Bodies that fail to decode never reach the match service
@app.exception_handler(RequestValidationError)
async def malformed_request(request: Request, exc: RequestValidationError):
    logger.info("Rejected malformed request to %s: %s", request.url.path, exc.errors())
    return JSONResponse(status_code=400, content={"detail": "Could not decode json body"})


# ✅ Connect to redis on startup, fail fast if it is unreachable
@app.on_event("startup")
async def startup():
    if RATING_CONSISTENCY not in CONSISTENCY_MODES:
        raise RuntimeError(f"RATING_CONSISTENCY must be one of {CONSISTENCY_MODES}, got {RATING_CONSISTENCY!r}")

    app.state.redis = create_redis()
    try:
        await app.state.redis.ping()
    except RedisError as e:
        logger.critical("Could not connect to redis, exiting...")
        raise RuntimeError("Could not connect to redis") from e
    logger.info("Connected to redis, consistency mode: %s", RATING_CONSISTENCY)


@app.on_event("shutdown")
async def shutdown():
    await app.state.redis.aclose()
    await app.state.redis.connection_pool.disconnect()


# ✅ Register routers
app.include_router(players_router, tags=["Players"])
app.include_router(matches_router, tags=["Matches"])

# ✅ Uvicorn entry point with proxy headers enabled
if __name__ == "__main__":
    import os

    # Optional: Allow from specific IP or set via environment variable
    forwarded_ips = os.getenv("FORWARDED_ALLOW_IPS", "*")

    uvicorn.run(
        "rating_service.main:app",
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", 8080)),
        proxy_headers=True,           # ✅ Trust proxy headers
        forwarded_allow_ips=forwarded_ips,  # ✅ Accept X-Forwarded-* headers
    )

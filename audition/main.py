"""
FastAPI main application
Live dance-audition scoring server

Modular architecture with separated API routers in audition/api/:
- health.py: Health check and system status
- config.py: Configuration retrieval
- auth.py: PIN login, bearer tokens
- sessions.py: Session CRUD and lock/unlock
- roster.py: Dancers, materials, judges
- groups.py: Template groups, push/retract/archive, progress
- scores.py: Score submission and editing
- results.py: Ranked results and CSV/JSON export
- realtime.py: Websocket change feed

All routers access shared state via audition.state module.
"""
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
import logging

from audition import __version__, state
from audition.config import get_settings
from audition.errors import AuditionError

# Import all API routers
from audition.api import auth, groups, health, realtime, results, roster, scores, sessions
from audition.api import config as config_router


# Setup logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events"""
    # Startup: load settings and open the store
    try:
        settings = get_settings()
        logging.getLogger().setLevel(settings.log_level.upper())
        state.reset(settings)
        logger.info(f"✅ Server started with database {settings.database_path}")
    except Exception as e:
        logger.error(f"❌ Failed to start: {e}")
        raise

    yield

    # Shutdown
    logger.info("🛑 Server shutting down")


class SettingsCORSMiddleware(CORSMiddleware):
    """CORS with origins read from settings when the middleware stack is built at startup"""

    def __init__(self, app, **kwargs):
        try:
            origins = get_settings().cors_allow_origins
        except Exception as e:
            logger.error(f"❌ Failed to start: {e}")
            raise
        super().__init__(app, allow_origins=origins, **kwargs)


# Create FastAPI app
app = FastAPI(
    title="Dance Audition Scoring Server",
    description="Live multi-judge scoring for dance auditions",
    version=__version__,
    lifespan=lifespan
)

# CORS middleware (origins from settings, all by default)
app.add_middleware(
    SettingsCORSMiddleware,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(AuditionError)
async def audition_error_handler(request: Request, exc: AuditionError):
    if exc.status_code >= 500:
        logger.error(f"❌ {request.method} {request.url.path}: {exc}")
    else:
        logger.info(f"⚠️ {request.method} {request.url.path} -> {exc.status_code}: {exc}")
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})


# ==================== INCLUDE ROUTERS ====================

# Health check (GET /)
app.include_router(health.router)

# Config endpoint (GET /config)
app.include_router(config_router.router)

# Login (POST /auth/login)
app.include_router(auth.router)

# Sessions (GET/POST /sessions, /sessions/{id}/lock)
app.include_router(sessions.router)

# Roster (/dancers, /materials, /judges)
app.include_router(roster.router)

# Groups (/groups, /groups/{id}/push, /groups/{id}/retract)
app.include_router(groups.router)

# Scores (POST /scores/submit, PATCH /scores/{id})
app.include_router(scores.router)

# Results (GET /results/{session_id}, /results/{session_id}/export)
app.include_router(results.router)

# Change feed (WS /ws/sessions/{session_id})
app.include_router(realtime.router)


# ==================== RUN SERVER ====================

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)

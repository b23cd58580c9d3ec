"""ArtRoom FastAPI application."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

# Configure logging so our INFO messages appear in container logs
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
# Keep noisy libraries at WARNING
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("httpcore").setLevel(logging.WARNING)
from fastapi.middleware.cors import CORSMiddleware

from backend.config import settings
from backend.remote.lifecycle import close_remote, create_remote
from backend.routers import auth, gallery, invite, manage, upload
from backend.services.actions import ActionTracker

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application startup and shutdown lifecycle."""
    # Startup
    app.state.remote = create_remote()
    if not settings.jwt_secret:
        logger.info(
            "ARTROOM_JWT_SECRET is not set; sessions will be checked against "
            "the auth service on every request."
        )

    yield
    # Shutdown
    await close_remote(app.state.remote)
    app.state.remote = None


app = FastAPI(
    title="ArtRoom",
    description="Family room for children's artwork",
    version="0.1.0",
    lifespan=lifespan,
)

# One registry of in-flight mutations for the whole app
app.state.actions = ActionTracker()

# CORS: localhost defaults plus any extra origins from ARTROOM_CORS_ORIGINS
_cors_origins = ["http://localhost:3000", "http://localhost:8080"]
if settings.cors_origins:
    _cors_origins.extend(o.strip() for o in settings.cors_origins.split(",") if o.strip())
app.add_middleware(
    CORSMiddleware,
    allow_origins=_cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# API routers
app.include_router(auth.router)
app.include_router(manage.router)
app.include_router(upload.router)
app.include_router(gallery.router)
app.include_router(invite.router)


# Health check (public, no auth)
@app.get("/api/health")
async def health():
    return {"status": "ok", "version": "0.1.0"}

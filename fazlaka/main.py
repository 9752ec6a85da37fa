"""Main FastAPI application."""

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from fazlaka import __version__
from fazlaka.config import settings
from fazlaka.errors import register_exception_handlers
from fazlaka.rate_limiter import limiter
from fazlaka.schemas.common import ERROR_RESPONSES

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper()),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)

logger = logging.getLogger(__name__)

# Create FastAPI app
app = FastAPI(
    title="Fazlaka API",
    description="Accounts, sessions, notifications, favorites and comments for the Fazlaka content platform",
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
    debug=settings.debug,
)

# Add rate limiter to app state; errors are rendered by the shared handlers
app.state.limiter = limiter
register_exception_handlers(app)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/")
async def root():
    """Root endpoint."""
    return {"message": "Fazlaka API", "version": __version__, "status": "running"}


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy"}


# Import and include routers
from fazlaka.routers import (  # noqa: E402
    auth,
    comments,
    contact,
    favorites,
    notifications,
    users,
)

app.include_router(auth.router, prefix="/api", responses=ERROR_RESPONSES)
app.include_router(users.router, prefix="/api", responses=ERROR_RESPONSES)
app.include_router(notifications.router, prefix="/api", responses=ERROR_RESPONSES)
app.include_router(favorites.router, prefix="/api", responses=ERROR_RESPONSES)
app.include_router(comments.router, prefix="/api", responses=ERROR_RESPONSES)
app.include_router(contact.router, prefix="/api", responses=ERROR_RESPONSES)

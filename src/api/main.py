"""FastAPI application entry point."""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from api.models.responses import ErrorCodes, ErrorResponse
from api.routes import exports_router, health_router, webhooks_router
from core.config import API_DEBUG, API_VERSION, DB_PATH
from core.database import get_connection, init_schema
from core.pending_status import PendingStatusStore
from services.slack import UserProfileCache


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup/shutdown."""
    # Startup: make sure the database and tables exist
    app.state.db_path.parent.mkdir(parents=True, exist_ok=True)
    conn = get_connection(app.state.db_path)
    try:
        init_schema(conn)
    finally:
        conn.close()

    yield


app = FastAPI(
    title="Shift Attendance Bot API",
    description="Chat webhooks for shift/break/status tracking and attendance exports",
    version=API_VERSION,
    debug=API_DEBUG,
    lifespan=lifespan,
)

# Process-local state shared by the webhooks
app.state.db_path = DB_PATH
app.state.pending_status = PendingStatusStore()
app.state.seen_user_chats = set()
app.state.slack_profiles = UserProfileCache()

# CORS middleware (for development)
if API_DEBUG:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )


# Global exception handler for unexpected errors
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Handle unexpected exceptions with standard error format."""
    return JSONResponse(
        status_code=500,
        content=ErrorResponse(
            error="Internal server error",
            code=ErrorCodes.INTERNAL_ERROR,
            details=[],
        ).model_dump(),
    )


# Include routers
app.include_router(health_router)
app.include_router(webhooks_router)
app.include_router(exports_router)


# Entry point for uvicorn
if __name__ == "__main__":
    import uvicorn

    from core.config import API_HOST, API_PORT

    uvicorn.run(
        "api.main:app",
        host=API_HOST,
        port=API_PORT,
        reload=API_DEBUG,
    )

"""FastAPI entrypoint for the SnapQuiz backend."""

import logging
import sys

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from starlette.middleware.cors import CORSMiddleware
from starlette.middleware.sessions import SessionMiddleware

from snapquiz.config import get_settings
from snapquiz.database import create_db_and_tables
from snapquiz.exceptions import GenerationError, InvalidSelection, NotFound, PersistenceError, ValidationError
from snapquiz.routers import attempts as attempts_router_module
from snapquiz.routers import auth as auth_router_module
from snapquiz.routers import tests as tests_router_module
from snapquiz.routers import users as users_router_module

settings = get_settings()

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    handlers=[logging.StreamHandler(sys.stdout)],
)
logger = logging.getLogger(__name__)

app = FastAPI(title="SnapQuiz API")


@app.exception_handler(ValidationError)
async def validation_error_handler(request: Request, exc: ValidationError):
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"success": False, "message": str(exc)},
    )


@app.exception_handler(NotFound)
async def not_found_handler(request: Request, exc: NotFound):
    return JSONResponse(
        status_code=status.HTTP_404_NOT_FOUND,
        content={"success": False, "message": str(exc)},
    )


@app.exception_handler(PersistenceError)
async def persistence_error_handler(request: Request, exc: PersistenceError):
    logger.error(f"Persistence failure on {request.url.path}: {exc} (cause: {exc.cause!r})")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"success": False, "message": str(exc)},
    )


@app.exception_handler(InvalidSelection)
async def invalid_selection_handler(request: Request, exc: InvalidSelection):
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"success": False, "message": str(exc)},
    )


@app.exception_handler(GenerationError)
async def generation_error_handler(request: Request, exc: GenerationError):
    logger.error(f"Test generation failed on {request.url.path}: {exc}")
    return JSONResponse(
        status_code=status.HTTP_502_BAD_GATEWAY,
        content={"success": False, "message": "Failed to process file."},
    )


# Session middleware for simple cookie-based authentication
app.add_middleware(
    SessionMiddleware,
    secret_key=settings.secret_key,
    https_only=settings.environment == "production",
)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE"],
    allow_headers=["Content-Type", "Authorization"],
)

# Routers
app.include_router(auth_router_module.router, prefix="/api/auth", tags=["auth"])
app.include_router(users_router_module.router, prefix="/api/users", tags=["users"])
app.include_router(tests_router_module.router, prefix="/api/tests", tags=["tests"])
app.include_router(attempts_router_module.router, prefix="/api/attempts", tags=["attempts"])


@app.get("/")
def root():
    return {"message": "Welcome to SnapQuiz API"}


@app.on_event("startup")
def on_startup():
    """Initialize database schema."""
    create_db_and_tables()
    logger.info("Database tables initialized")


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("snapquiz.main:app", host="0.0.0.0", port=8000, reload=True)

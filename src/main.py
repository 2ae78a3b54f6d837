"""Main FastAPI application for the Markdown blog API."""

import os
import logging
from pathlib import Path
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException
from dotenv import load_dotenv

from src.database import init_db
from src.routers import auth, posts, profiles, upload

# Load environment variables
load_dotenv()

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[
        logging.StreamHandler(),
        logging.FileHandler('markdown_blog_api.log')
    ]
)

logger = logging.getLogger(__name__)

# Get configuration from environment
NAME_APP = os.getenv("NAME_APP", "MarkdownBlogAPI")
ALLOWED_ORIGIN = os.getenv("ALLOWED_ORIGIN", "*")
PATH_PUBLIC = os.getenv("PATH_PUBLIC", str(Path(__file__).resolve().parent.parent / "public"))

# Create FastAPI application
app = FastAPI(
    title=NAME_APP,
    description="API for a Markdown blog with drafts, publishing and image uploads",
    version="1.0.0"
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=[origin.strip() for origin in ALLOWED_ORIGIN.split(",")],
    allow_credentials=ALLOWED_ORIGIN != "*",
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
)


# Every error leaves the API as {"error": str | list[str]}
@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.detail},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    messages = []
    for error in exc.errors():
        field = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
        messages.append(f"{field}: {error.get('msg')}" if field else error.get("msg"))
    logger.warning(f"Validation failed for {request.method} {request.url.path}: {messages}")
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": messages},
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": "server_error"},
    )


# Include routers
app.include_router(auth.router)
app.include_router(posts.router)
app.include_router(profiles.router)
app.include_router(upload.router)


@app.on_event("startup")
def startup_event():
    """Initialize database on application startup."""
    logger.info(f"Starting {NAME_APP}")
    init_db()
    logger.info("Database initialized successfully")


@app.get("/health")
def health_check():
    """Health check endpoint."""
    return {"ok": True}


# Mount the single-page client last so it never shadows API routes
public_path = Path(PATH_PUBLIC)
if public_path.is_dir():
    app.mount("/", StaticFiles(directory=str(public_path), html=True), name="public")
    logger.info(f"Mounted client application from {public_path}")
else:
    logger.warning(f"Client directory not found, not mounting: {public_path}")


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=int(os.getenv("PORT", "8000")))

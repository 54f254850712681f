import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .api import contacts, health, nlte, scheduled
from .config import settings
from .logging_config import setup_logging

setup_logging()

logger = logging.getLogger(__name__)

# Create FastAPI app
app = FastAPI(
    title="NLTE API",
    description="Natural Language Transaction Engine for Celo",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc"
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(health.router, tags=["Health"])
app.include_router(nlte.router, tags=["NLTE"])
app.include_router(contacts.router, tags=["Contacts"])
app.include_router(scheduled.router, tags=["Scheduled"])


@app.exception_handler(Exception)
async def unhandled_error(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"success": False, "error": "Internal server error"})


@app.get("/")
async def root():
    """Root endpoint with basic info"""
    return {
        "name": "NLTE API",
        "version": "1.0.0",
        "description": "Natural Language Transaction Engine for Celo",
        "network": settings.network_slug,
        "docs": "/docs",
        "health": "/healthz"
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "nlte.main:app",
        host=settings.host,
        port=settings.port,
        reload=True,
        log_level=settings.log_level.lower()
    )

"""
CaptionSync Backend - Unified Application Entry Point
Mounts the caption service under a single FastAPI application
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from services.captions import app as captions_module
from shared.utils import config, setup_logging

logger = setup_logging("captionsync-backend")

captions_app = captions_module.app

app = FastAPI(
    title="CaptionSync Backend API",
    description="""
    Caption track synchronization and export API.

    The caption service is mounted at /api/v1/captions with its own docs.
    """,
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_tags=[
        {
            "name": "Health",
            "description": "Service health and status endpoints",
        },
    ],
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.get("allowed_origins", ["*"]),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.mount("/api/v1/captions", captions_app)


@app.get("/", tags=["Health"])
async def root():
    """Root endpoint with service information and API navigation"""
    return {
        "service": "CaptionSync Backend API",
        "version": "1.0.0",
        "services": {
            "captions": {
                "base_url": "/api/v1/captions",
                "docs": "/api/v1/captions/docs",
                "health": "/api/v1/captions/health",
            },
        },
        "documentation": {
            "swagger_ui": "/docs",
            "redoc": "/redoc",
            "openapi_json": "/openapi.json",
        },
    }


@app.get("/health", tags=["Health"])
async def health_check():
    """Health check endpoint for all services"""
    return {
        "status": "healthy",
        "services": {
            "api_gateway": "operational",
            "captions": "operational",
        },
    }


if __name__ == "__main__":
    import uvicorn

    logger.info("Starting CaptionSync Backend on http://0.0.0.0:8000")
    uvicorn.run("app:app", host="0.0.0.0", port=8000, reload=True, log_level="info")

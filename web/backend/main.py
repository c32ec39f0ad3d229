"""flowcanvas flow viewer - FastAPI application."""

from __future__ import annotations

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .routes import flow_router, providers_router, ui_config_router


# Create FastAPI app
app = FastAPI(
    title="flowcanvas",
    description="Layout and inspection of declarative prompt flows",
    version="0.1.0",
)

# Configure CORS for development
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # In production, specify exact origins
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(flow_router, prefix="/api")
app.include_router(providers_router, prefix="/api")
app.include_router(ui_config_router, prefix="/api")


@app.get("/api/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "service": "flowcanvas"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "web.backend.main:app",
        host="0.0.0.0",
        port=8080,
        reload=True,
    )

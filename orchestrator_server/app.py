"""FastAPI application for the workflow editor."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from orchestrator.errors import MalformedImport, StructuralViolation, UpstreamGenerationFailure
from orchestrator_server.config import CORS_ORIGINS, DB_PATH, configure_logging
from orchestrator_server.db import init_all
from orchestrator_server.generation_routes import router as generation_router
from orchestrator_server.template_routes import router as template_router
from orchestrator_server.workflow_routes import router as workflow_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Initialize logging and storage on startup."""
    configure_logging()
    init_all()
    yield


app = FastAPI(
    title="Orchestrator API",
    description="API server for editing, generating and versioning agent workflows",
    version="0.1.0",
    lifespan=lifespan,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# domain errors -> HTTP status
@app.exception_handler(StructuralViolation)
def structural_violation_handler(request: Request, exc: StructuralViolation) -> JSONResponse:
    return JSONResponse(status_code=409, content={"detail": str(exc)})


@app.exception_handler(MalformedImport)
def malformed_import_handler(request: Request, exc: MalformedImport) -> JSONResponse:
    return JSONResponse(status_code=422, content={"detail": str(exc)})


@app.exception_handler(UpstreamGenerationFailure)
def generation_failure_handler(request: Request, exc: UpstreamGenerationFailure) -> JSONResponse:
    logger.warning("generation failed: %s", exc)
    return JSONResponse(status_code=502, content={"detail": str(exc)})


# include routes
app.include_router(workflow_router, prefix="/api")
app.include_router(template_router, prefix="/api")
app.include_router(generation_router, prefix="/api")


@app.get("/")
def root():
    """Health check endpoint."""
    return {
        "status": "ok",
        "version": "0.1.0",
        "db": str(DB_PATH),
        "endpoints": {
            "sessions": "/api/sessions",
            "templates": "/api/templates",
            "generate": "/api/generate",
            "agent_types": "/api/agent-types",
        },
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)

"""Prompt evaluation FastAPI application."""

import logging

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from prompteval.api.evaluations import router as evaluations_router
from prompteval.api.health import router as health_router
from prompteval.api.prompts import router as prompts_router
from prompteval.api.test_cases import router as test_cases_router
from prompteval.config import settings
from prompteval.errors import GenerationFailed, NotFound, ValidationError

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="PromptEval - Prompt Evaluation Engine",
    description="Versioned prompt templates evaluated against reusable test cases",
    version="0.1.0",
    docs_url="/docs",
    redoc_url="/redoc",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(NotFound)
async def not_found_handler(request: Request, exc: NotFound):
    return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content={"detail": str(exc)})


@app.exception_handler(ValidationError)
async def validation_error_handler(request: Request, exc: ValidationError):
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, content={"detail": exc.message}
    )


@app.exception_handler(GenerationFailed)
async def generation_failed_handler(request: Request, exc: GenerationFailed):
    logger.warning("Generation failed on %s: %s", request.url.path, exc.reason)
    return JSONResponse(
        status_code=status.HTTP_502_BAD_GATEWAY,
        content={"detail": "Generation failed", "reason": exc.reason},
    )


app.include_router(health_router, tags=["Health"])
app.include_router(prompts_router, prefix="/v1", tags=["Prompts"])
app.include_router(test_cases_router, prefix="/v1", tags=["Test Cases"])
app.include_router(evaluations_router, prefix="/v1", tags=["Evaluations"])


@app.get("/")
async def root():
    """Root endpoint."""
    return {"service": "PromptEval", "version": "0.1.0", "docs": "/docs"}

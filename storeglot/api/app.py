"""
FastAPI application for storeglot.

HTTP surface over the translation pipeline: one-shot document translation,
fragment extraction, background jobs, the translation memory and entity
sync with the configured content source.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel

from storeglot import __version__
from storeglot.backends import BackendError, TranslationBackend, create_backend
from storeglot.config import Settings, configure_logging, get_settings
from storeglot.core.errors import ContentSourceError, JobNotFoundError, ParserError, StoreglotError
from storeglot.core.models import (
    ContentType,
    ExtractedText,
    MemoryEntry,
    Translation,
    TranslationStatistics,
    TranslationStatus,
    ValidationResult,
)
from storeglot.core.registry import RegistryError
from storeglot.i18n import (
    EntityResult,
    EntityTranslator,
    JobManager,
    JobStatus,
    TranslationMemory,
    TranslationOrchestrator,
)
from storeglot.sources import ENTITY_TYPES, ContentSource, SaleorSource

logger = logging.getLogger(__name__)


# =============================================================================
# App State
# =============================================================================


class AppState:
    """Application state - initialized at startup."""

    settings: Settings
    backend: TranslationBackend
    memory: TranslationMemory
    orchestrator: TranslationOrchestrator
    jobs: JobManager
    source: ContentSource | None = None

    @property
    def ready(self) -> bool:
        return hasattr(self, "orchestrator")

    def setup(
        self,
        settings: Settings,
        backend: TranslationBackend | None = None,
        memory: TranslationMemory | None = None,
        source: ContentSource | None = None,
    ) -> None:
        """Wire services together; tests pass their own backend and source."""
        self.settings = settings
        self.backend = backend or create_backend(settings=settings)
        self.memory = memory or TranslationMemory(
            path=settings.translation_memory_path or None,
            max_entries=settings.translation_memory_max_entries,
        )
        self.orchestrator = TranslationOrchestrator.from_settings(
            self.backend, memory=self.memory, settings=settings
        )
        self.jobs = JobManager(self.orchestrator)
        if source is not None:
            self.source = source
        elif settings.saleor_api_endpoint:
            self.source = SaleorSource.from_settings(settings)


state = AppState()


# =============================================================================
# Lifespan
# =============================================================================


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Initialize and cleanup app resources."""
    settings = get_settings()
    configure_logging(settings.log_level)

    if not state.ready:
        state.setup(settings)

    logger.info(
        "Storeglot API starting in %s mode (backend: %s)",
        settings.environment,
        state.backend.provider.value,
    )

    yield

    await state.backend.aclose()
    logger.info("Storeglot API shutting down")


# =============================================================================
# App Setup
# =============================================================================


app = FastAPI(
    title="Storeglot API",
    description="Structure-preserving translation for online store content",
    version=__version__,
    lifespan=lifespan,
)


settings = get_settings()
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# =============================================================================
# Dependencies
# =============================================================================


def get_orchestrator() -> TranslationOrchestrator:
    return state.orchestrator


def get_jobs() -> JobManager:
    return state.jobs


def get_memory() -> TranslationMemory:
    return state.memory


def to_http_error(error: StoreglotError) -> HTTPException:
    if isinstance(error, JobNotFoundError):
        return HTTPException(status_code=404, detail=str(error))
    if isinstance(error, BackendError):
        return HTTPException(status_code=502, detail=error.message)
    if isinstance(error, ContentSourceError):
        return HTTPException(status_code=502, detail=str(error))
    return HTTPException(status_code=400, detail=str(error))


# =============================================================================
# Request/Response Models
# =============================================================================


class TranslateRequest(BaseModel):
    content: str
    target_language: str
    source_language: str | None = None
    content_type: ContentType | None = None
    context: str = ""


class ParseRequest(BaseModel):
    content: str
    content_type: ContentType | None = None


class ParseResponse(BaseModel):
    content_type: ContentType
    fragments: list[ExtractedText]


class SubmitJobRequest(BaseModel):
    texts: list[str]
    target_language: str
    source_language: str | None = None


class SyncRequest(BaseModel):
    content_type: str
    target_language: str


class MemoryResponse(BaseModel):
    stats: dict
    entries: list[MemoryEntry]


# =============================================================================
# Health Check
# =============================================================================


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "service": "storeglot-api",
        "backend": state.backend.provider.value if state.ready else None,
    }


# =============================================================================
# Translation
# =============================================================================


@app.post("/translate", response_model=Translation)
async def translate(
    request: TranslateRequest,
    orchestrator: TranslationOrchestrator = Depends(get_orchestrator),
):
    """Translate one document, keeping its structure."""
    try:
        return await orchestrator.process_document(
            request.content,
            request.source_language,
            request.target_language,
            context=request.context,
            content_type=request.content_type,
        )
    except (RegistryError, BackendError) as e:
        raise to_http_error(e)


@app.post("/translate/validate", response_model=ValidationResult)
async def validate_translation(
    translation: Translation,
    orchestrator: TranslationOrchestrator = Depends(get_orchestrator),
):
    """Check a finished translation for structural and quality issues."""
    try:
        return orchestrator.validate_translation(translation)
    except RegistryError as e:
        raise to_http_error(e)


@app.post("/parse", response_model=ParseResponse)
async def parse(
    request: ParseRequest,
    orchestrator: TranslationOrchestrator = Depends(get_orchestrator),
):
    """Extract translatable fragments without translating them."""
    try:
        parser, fragments = orchestrator.registry.extract(
            request.content, request.content_type, strict=True
        )
    except (RegistryError, ParserError) as e:
        raise to_http_error(e)
    return ParseResponse(content_type=parser.content_type, fragments=fragments)


# =============================================================================
# Jobs
# =============================================================================


@app.post("/jobs", response_model=JobStatus, status_code=202)
async def submit_job(
    request: SubmitJobRequest,
    jobs: JobManager = Depends(get_jobs),
):
    """Start translating a list of texts in the background."""
    if not request.texts:
        raise HTTPException(status_code=400, detail="No texts to translate")
    job = jobs.submit(request.texts, request.source_language, request.target_language)
    return JobStatus.of(job)


@app.get("/jobs", response_model=list[JobStatus])
async def list_jobs(
    status: TranslationStatus | None = None,
    jobs: JobManager = Depends(get_jobs),
):
    """List jobs, newest first."""
    return [JobStatus.of(job) for job in jobs.list(status)]


@app.get("/jobs/{job_id}")
async def get_job(job_id: str, jobs: JobManager = Depends(get_jobs)):
    """Get a job's progress and, once finished, its results."""
    try:
        job = jobs.get(job_id)
    except JobNotFoundError as e:
        raise to_http_error(e)
    return {**JobStatus.of(job).model_dump(mode="json"), "results": job.results}


@app.post("/jobs/{job_id}/cancel", response_model=JobStatus)
async def cancel_job(job_id: str, jobs: JobManager = Depends(get_jobs)):
    try:
        return JobStatus.of(jobs.cancel(job_id))
    except JobNotFoundError as e:
        raise to_http_error(e)


@app.post("/jobs/{job_id}/retry", response_model=JobStatus)
async def retry_job(job_id: str, jobs: JobManager = Depends(get_jobs)):
    """Restart a failed job."""
    try:
        return JobStatus.of(jobs.retry(job_id))
    except StoreglotError as e:
        raise to_http_error(e)


# =============================================================================
# Translation Memory
# =============================================================================


@app.get("/memory", response_model=MemoryResponse)
async def get_memory_entries(
    limit: int = 100,
    memory: TranslationMemory = Depends(get_memory),
):
    """Memory statistics and the most recently used entries."""
    entries = sorted(memory.export(), key=lambda e: e.last_used, reverse=True)
    return MemoryResponse(stats=memory.stats(), entries=entries[:limit])


@app.delete("/memory")
async def clear_memory(memory: TranslationMemory = Depends(get_memory)):
    cleared = len(memory)
    memory.clear()
    return {"cleared": cleared}


@app.post("/memory/import")
async def import_memory(
    entries: list[MemoryEntry],
    memory: TranslationMemory = Depends(get_memory),
):
    """Merge exported memory entries."""
    return {"imported": memory.import_entries(entries), "entries": len(memory)}


# =============================================================================
# Statistics
# =============================================================================


@app.get("/stats", response_model=TranslationStatistics)
async def get_stats(orchestrator: TranslationOrchestrator = Depends(get_orchestrator)):
    """Usage statistics across the memory and this process's translations."""
    return orchestrator.statistics()


# =============================================================================
# Entity Sync
# =============================================================================


@app.post("/sync", response_model=list[EntityResult])
async def sync_entities(
    request: SyncRequest,
    orchestrator: TranslationOrchestrator = Depends(get_orchestrator),
):
    """Translate untranslated store entities and write them back."""
    if state.source is None:
        raise HTTPException(status_code=400, detail="No content source configured")
    if request.content_type not in ENTITY_TYPES:
        raise HTTPException(status_code=400, detail=f"Unknown content type '{request.content_type}'")
    translator = EntityTranslator(
        orchestrator, state.source, source_language=state.settings.default_source_language
    )
    try:
        return await translator.translate_entities(request.content_type, request.target_language)
    except ContentSourceError as e:
        raise to_http_error(e)

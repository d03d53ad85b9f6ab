"""FastAPI application exposing repository registration and documentation generation."""

from __future__ import annotations

import asyncio
import re
import uuid
from datetime import UTC, datetime
from pathlib import Path
from typing import Any, Callable, List, Optional, Tuple

from fastapi import BackgroundTasks, FastAPI, HTTPException
from fastapi.responses import JSONResponse, Response
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from ..config import DocweaveConfig
from ..errors import RepositoryAnalysisFailed
from ..generator import DocumentationGenerator, GeneratedDocumentation
from ..llm.runner import LLMRunner
from ..logging import get_logger
from ..models import AnalysisResult
from ..orchestrator import AnalysisOrchestrator
from ..stores import (
    FileDocumentationStore,
    GenerationStatusStore,
    InMemoryDocumentationStore,
    InMemoryRepositoryRegistry,
    JsonRepositoryRegistry,
    RepositoryNotFound,
    RepositoryRecord,
    RepositoryRegistry,
)

_REPOSITORY_URL = re.compile(r"^https://(github\.com|gitlab\.com|bitbucket\.org)/.+\.git$")

OrchestratorFactory = Callable[[], AnalysisOrchestrator]
GeneratorFactory = Callable[[Optional[str]], DocumentationGenerator]


def is_supported_repository_url(url: str) -> bool:
    """Accept hosted ``https://….git`` URLs or anything on github.com."""
    return bool(_REPOSITORY_URL.match(url)) or "github.com" in url


def _utc_now() -> str:
    return datetime.now(UTC).isoformat().replace("+00:00", "Z")


# ----------------------------------------------------------------------
# Schemas


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class HealthResponse(_CamelModel):
    status: str


class RepositoryModel(_CamelModel):
    id: str
    name: str
    url: str
    branch: str
    type: str
    status: str
    has_documentation: bool
    auto_update: bool
    auto_merge: bool
    last_updated: str
    documentation_file: Optional[str] = None

    @classmethod
    def from_record(cls, record: RepositoryRecord) -> "RepositoryModel":
        return cls(
            id=record.id,
            name=record.name,
            url=record.url,
            branch=record.branch,
            type=record.type,
            status=record.status,
            has_documentation=record.has_documentation,
            auto_update=record.auto_update,
            auto_merge=record.auto_merge,
            last_updated=record.last_updated,
            documentation_file=record.documentation_file,
        )


class RepositoryListResponse(_CamelModel):
    repositories: List[RepositoryModel]


class RepositoryResponse(_CamelModel):
    success: bool = True
    repository: RepositoryModel
    message: Optional[str] = None


class CreateRepositoryRequest(_CamelModel):
    name: str = Field(min_length=1)
    url: str = Field(min_length=1)
    branch: str = "main"
    auto_update: bool = False
    auto_merge: bool = False


class UpdateRepositoryRequest(_CamelModel):
    name: Optional[str] = None
    url: Optional[str] = None
    branch: Optional[str] = None
    auto_update: Optional[bool] = None
    auto_merge: Optional[bool] = None


class UpdateStatusRequest(_CamelModel):
    url: str = Field(min_length=1)
    status: Optional[str] = None
    has_documentation: Optional[bool] = None


class MessageResponse(_CamelModel):
    success: bool = True
    message: str


class GenerateRequest(_CamelModel):
    repo_url: str = Field(min_length=1)
    api_key: str = Field(min_length=1)
    branch: str = "main"
    repo_id: Optional[str] = None


class GenerateResponse(_CamelModel):
    success: bool = True
    generation_id: str
    documentation: str
    message: str
    repo_name: str
    used_fallback: bool


class DocumentationResponse(_CamelModel):
    success: bool = True
    documentation: str
    source: str
    filename: Optional[str] = None
    generated_at: str


class StoreDocumentationRequest(_CamelModel):
    documentation: str


class StatusRequest(_CamelModel):
    status: Optional[str] = None
    message: Optional[str] = None
    progress: Optional[int] = None


class StatusResponse(_CamelModel):
    id: str
    status: str
    message: str
    progress: Optional[int] = None
    updated_at: Optional[str] = None


# ----------------------------------------------------------------------
# Application


def create_app(
    config: DocweaveConfig | None = None,
    *,
    registry: RepositoryRegistry | None = None,
    documents: FileDocumentationStore | None = None,
    drafts: InMemoryDocumentationStore | None = None,
    statuses: GenerationStatusStore | None = None,
    orchestrator_factory: OrchestratorFactory | None = None,
    generator_factory: GeneratorFactory | None = None,
) -> FastAPI:
    """Create the FastAPI application exposing docweave operations.

    Stores not passed explicitly are built from ``config.storage``; the
    ``memory`` backend keeps documents only in ``drafts``.
    """
    config = config or DocweaveConfig(root=Path.cwd())
    if registry is None or (documents is None and config.storage.backend == "file"):
        default_registry, default_documents = _stores_for(config)
        registry = registry or default_registry
        documents = documents or default_documents
    drafts = drafts or InMemoryDocumentationStore()
    statuses = statuses or GenerationStatusStore()
    if orchestrator_factory is None:
        orchestrator_factory = lambda: AnalysisOrchestrator.from_config(config)  # noqa: E731
    if generator_factory is None:
        generator_factory = lambda api_key: DocumentationGenerator(  # noqa: E731
            LLMRunner.from_config(config.llm, api_key=api_key)
        )

    logger = get_logger("service")
    app = FastAPI(title="Docweave Service", version="1.0.0")

    def _store_markdown(record: RepositoryRecord, markdown: str) -> Optional[str]:
        drafts.set(record.id, markdown)
        if documents is None:
            return None
        return documents.save(record.id, record.name, markdown)

    def _analyze_and_generate(
        repo_url: str, branch: str, api_key: Optional[str]
    ) -> Tuple[AnalysisResult, GeneratedDocumentation]:
        analysis = orchestrator_factory().analyze_repository(repo_url, branch)
        return analysis, generator_factory(api_key).generate(analysis)

    def _document_repository(repo_id: str) -> None:
        try:
            record = registry.get(repo_id)
        except RepositoryNotFound:
            logger.warning("Repository %s was removed before documentation started", repo_id)
            return
        statuses.set(repo_id, "generating", "Analyzing repository", 0)
        try:
            _, generated = _analyze_and_generate(record.url, record.branch, None)
            filename = _store_markdown(record, generated.markdown)
            registry.update(
                repo_id,
                {"status": "up-to-date", "has_documentation": True, "documentation_file": filename},
            )
        except RepositoryNotFound:
            logger.warning("Repository %s was removed during documentation", repo_id)
            return
        except Exception as exc:  # background task has no caller to report to
            logger.error("Documentation failed for repository %s: %s", repo_id, exc)
            statuses.set(repo_id, "failed", str(exc))
            try:
                registry.update_status(repo_id, "failed")
            except RepositoryNotFound:
                pass
            return
        statuses.set(repo_id, "completed", "Documentation generated", 100)

    def _resolve_documentation(doc_id: str) -> Tuple[str, str, Optional[str], str]:
        try:
            record: Optional[RepositoryRecord] = registry.get(doc_id)
        except RepositoryNotFound:
            record = None
        if record is not None and record.documentation_file and documents is not None:
            try:
                markdown = documents.read(record.documentation_file)
            except OSError as exc:
                logger.warning("Falling back to memory for %s: %s", doc_id, exc)
            else:
                return markdown, "file", record.documentation_file, record.last_updated
        markdown = drafts.get(doc_id)
        if not markdown:
            raise HTTPException(status_code=404, detail="Documentation not found")
        return markdown, "memory", None, _utc_now()

    @app.exception_handler(RepositoryNotFound)
    async def repository_not_found_handler(_: Any, exc: RepositoryNotFound) -> JSONResponse:
        return JSONResponse(status_code=404, content={"detail": str(exc)})

    @app.get("/health", response_model=HealthResponse)
    async def health() -> HealthResponse:
        return HealthResponse(status="ok")

    # Repositories -------------------------------------------------------

    @app.get("/repositories", response_model=RepositoryListResponse)
    async def list_repositories() -> RepositoryListResponse:
        return RepositoryListResponse(
            repositories=[RepositoryModel.from_record(record) for record in registry.list_all()]
        )

    @app.post("/repositories", response_model=RepositoryResponse)
    async def create_repository(
        payload: CreateRepositoryRequest, background_tasks: BackgroundTasks
    ) -> RepositoryResponse:
        record = registry.add(
            payload.name,
            payload.url,
            branch=payload.branch,
            auto_update=payload.auto_update,
            auto_merge=payload.auto_merge,
        )
        logger.info("Registered repository %s (%s)", record.name, record.id)
        background_tasks.add_task(_document_repository, record.id)
        return RepositoryResponse(repository=RepositoryModel.from_record(record))

    @app.post("/repositories/update-status", response_model=RepositoryResponse)
    async def update_repository_status(payload: UpdateStatusRequest) -> RepositoryResponse:
        record = registry.find_by_url(payload.url)
        if record is None:
            raise RepositoryNotFound(payload.url)
        try:
            updated = registry.update_status(
                record.id, payload.status or record.status, payload.has_documentation
            )
        except ValueError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc
        return RepositoryResponse(
            repository=RepositoryModel.from_record(updated),
            message="Repository status updated successfully",
        )

    @app.get("/repositories/{repo_id}", response_model=RepositoryResponse)
    async def get_repository(repo_id: str) -> RepositoryResponse:
        return RepositoryResponse(repository=RepositoryModel.from_record(registry.get(repo_id)))

    @app.put("/repositories/{repo_id}", response_model=RepositoryResponse)
    async def update_repository(repo_id: str, payload: UpdateRepositoryRequest) -> RepositoryResponse:
        updates = payload.model_dump(exclude_none=True)
        updated = registry.update(repo_id, updates)
        return RepositoryResponse(
            repository=RepositoryModel.from_record(updated),
            message="Repository updated successfully",
        )

    @app.delete("/repositories/{repo_id}", response_model=MessageResponse)
    async def delete_repository(repo_id: str) -> MessageResponse:
        removed = registry.delete(repo_id)
        if documents is not None:
            documents.delete(removed.documentation_file)
        drafts.delete(repo_id)
        return MessageResponse(message="Repository deleted successfully")

    # Generation ---------------------------------------------------------

    @app.post("/generate", response_model=GenerateResponse)
    async def generate(payload: GenerateRequest) -> GenerateResponse:
        if not is_supported_repository_url(payload.repo_url):
            raise HTTPException(
                status_code=400,
                detail="Invalid repository URL. Please provide a valid Git repository URL.",
            )
        generation_id = uuid.uuid4().hex
        statuses.set(generation_id, "generating", "Analyzing repository", 0)

        def _run() -> Tuple[AnalysisResult, GeneratedDocumentation]:
            return _analyze_and_generate(payload.repo_url, payload.branch, payload.api_key)

        loop = asyncio.get_running_loop()
        try:
            analysis, generated = await loop.run_in_executor(None, _run)
        except RepositoryAnalysisFailed as exc:
            statuses.set(generation_id, "failed", str(exc))
            if exc.repository_unavailable:
                raise HTTPException(status_code=422, detail=str(exc)) from exc
            logger.error("Generation %s failed: %s", generation_id, exc)
            raise HTTPException(status_code=500, detail="Repository analysis failed") from exc

        drafts.set(generation_id, generated.markdown)
        if payload.repo_id:
            try:
                record = registry.get(payload.repo_id)
            except RepositoryNotFound:
                logger.warning("Generation %s references unknown repository %s", generation_id, payload.repo_id)
            else:
                filename = _store_markdown(record, generated.markdown)
                registry.update(
                    record.id,
                    {"status": "up-to-date", "has_documentation": True, "documentation_file": filename},
                )
        statuses.set(generation_id, "completed", "Documentation generated", 100)
        return GenerateResponse(
            generation_id=generation_id,
            documentation=generated.markdown,
            message="Documentation generated successfully",
            repo_name=analysis.repository.name,
            used_fallback=generated.used_fallback,
        )

    # Documentation ------------------------------------------------------

    @app.get("/documentation/{doc_id}", response_model=DocumentationResponse)
    async def get_documentation(doc_id: str) -> DocumentationResponse:
        markdown, source, filename, generated_at = _resolve_documentation(doc_id)
        return DocumentationResponse(
            documentation=markdown, source=source, filename=filename, generated_at=generated_at
        )

    @app.post("/documentation/{doc_id}", response_model=MessageResponse)
    async def store_documentation(doc_id: str, payload: StoreDocumentationRequest) -> MessageResponse:
        drafts.set(doc_id, payload.documentation)
        return MessageResponse(message="Documentation stored successfully")

    @app.get("/documentation/{doc_id}/download")
    async def download_documentation(doc_id: str) -> Response:
        markdown, _, filename, _ = _resolve_documentation(doc_id)
        headers = {"Content-Disposition": f'attachment; filename="{filename or f"{doc_id}.md"}"'}
        return Response(content=markdown, media_type="text/markdown; charset=utf-8", headers=headers)

    # Status -------------------------------------------------------------

    @app.get("/status/{generation_id}", response_model=StatusResponse)
    async def get_status(generation_id: str) -> StatusResponse:
        return StatusResponse(**statuses.get(generation_id).to_dict())

    @app.post("/status/{generation_id}", response_model=MessageResponse)
    async def set_status(generation_id: str, payload: StatusRequest) -> MessageResponse:
        statuses.set(generation_id, payload.status, payload.message, payload.progress)
        return MessageResponse(message="Status updated")

    return app


def _stores_for(config: DocweaveConfig) -> Tuple[RepositoryRegistry, Optional[FileDocumentationStore]]:
    if config.storage.backend == "memory":
        return InMemoryRepositoryRegistry(), None
    data_dir = config.storage.data_dir
    return (
        JsonRepositoryRegistry(data_dir / "repositories.json"),
        FileDocumentationStore(data_dir / "documentation"),
    )


def run_service(
    config: DocweaveConfig | None = None,
    *,
    host: str | None = None,
    port: int | None = None,
) -> None:  # pragma: no cover - integration path
    import uvicorn

    config = config or DocweaveConfig(root=Path.cwd())
    app = create_app(config)
    uvicorn.run(app, host=host or config.service.host, port=port or config.service.port)


__all__ = ["create_app", "is_supported_repository_url", "run_service"]

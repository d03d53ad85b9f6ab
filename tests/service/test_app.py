"""Tests for the FastAPI service."""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional

import pytest
from fastapi.testclient import TestClient

from docweave.config import DocweaveConfig
from docweave.errors import FetchFailed, RepositoryAnalysisFailed
from docweave.generator import GeneratedDocumentation
from docweave.git.fetcher import repository_name
from docweave.models import AnalysisResult, RepositoryInfo
from docweave.service import create_app
from docweave.service.app import is_supported_repository_url

REPO_URL = "https://github.com/acme/shop.git"


class _StubOrchestrator:
    def __init__(self, error: Optional[Exception] = None) -> None:
        self.error = error
        self.calls: List[tuple[str, str]] = []

    def analyze_repository(self, repo_url: str, branch: str = "main") -> AnalysisResult:
        self.calls.append((repo_url, branch))
        if self.error is not None:
            raise self.error
        return AnalysisResult(
            repository=RepositoryInfo(
                name=repository_name(repo_url), analyzed_at="2024-05-01T10:00:00Z", total_files=2
            ),
            structure="shop/",
        )


class _StubGenerator:
    def __init__(self, api_key: Optional[str]) -> None:
        self.api_key = api_key

    def generate(self, analysis: AnalysisResult) -> GeneratedDocumentation:
        return GeneratedDocumentation(
            markdown=f"# {analysis.repository.name}\n",
            used_fallback=self.api_key is None,
            error=None if self.api_key else "No LLM API key configured",
        )


class _Harness:
    def __init__(self, tmp_path: Path, backend: str = "file") -> None:
        config = DocweaveConfig(root=tmp_path)
        config.storage.backend = backend
        config.storage.data_dir = tmp_path / "data"
        self.orchestrator = _StubOrchestrator()
        self.api_keys: List[Optional[str]] = []
        self.docs_dir = tmp_path / "data" / "documentation"
        app = create_app(
            config,
            orchestrator_factory=lambda: self.orchestrator,
            generator_factory=self._generator,
        )
        self.client = TestClient(app)

    def _generator(self, api_key: Optional[str]) -> _StubGenerator:
        self.api_keys.append(api_key)
        return _StubGenerator(api_key)

    def register(self, name: str = "shop", url: str = REPO_URL) -> dict:
        response = self.client.post("/repositories", json={"name": name, "url": url})
        assert response.status_code == 200
        return response.json()["repository"]


@pytest.fixture
def harness(tmp_path: Path) -> _Harness:
    return _Harness(tmp_path)


@pytest.mark.parametrize(
    ("url", "supported"),
    [
        ("https://github.com/acme/shop.git", True),
        ("https://gitlab.com/acme/shop.git", True),
        ("https://bitbucket.org/acme/shop.git", True),
        ("https://github.com/acme/shop", True),
        ("https://gitlab.com/acme/shop", False),
        ("https://example.com/acme/shop.git", False),
    ],
)
def test_supported_repository_urls(url: str, supported: bool) -> None:
    assert is_supported_repository_url(url) is supported


def test_health_endpoint(harness: _Harness) -> None:
    response = harness.client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_register_repository_documents_in_background(harness: _Harness) -> None:
    created = harness.register()

    assert created["id"] == "1"
    assert created["status"] == "generating"
    assert created["hasDocumentation"] is False

    stored = harness.client.get("/repositories/1").json()["repository"]
    assert stored["status"] == "up-to-date"
    assert stored["hasDocumentation"] is True
    assert stored["documentationFile"] == "shop-1.md"
    assert (harness.docs_dir / "shop-1.md").read_text(encoding="utf-8") == "# shop\n"
    assert harness.client.get("/status/1").json()["status"] == "completed"
    assert harness.api_keys == [None]


def test_background_failure_marks_repository_failed(harness: _Harness) -> None:
    harness.orchestrator.error = RepositoryAnalysisFailed(
        "Repository unavailable: gone",
        cause=FetchFailed(REPO_URL, "main", "repository not found"),
    )

    harness.register()

    stored = harness.client.get("/repositories/1").json()["repository"]
    assert stored["status"] == "failed"
    assert stored["hasDocumentation"] is False
    status = harness.client.get("/status/1").json()
    assert status["status"] == "failed"
    assert "gone" in status["message"]


def test_list_and_update_repositories(harness: _Harness) -> None:
    harness.register("shop")
    harness.register("billing", "https://github.com/acme/billing.git")

    listed = harness.client.get("/repositories").json()["repositories"]
    assert [item["name"] for item in listed] == ["shop", "billing"]

    response = harness.client.put("/repositories/2", json={"autoUpdate": True, "branch": "develop"})
    assert response.status_code == 200
    body = response.json()
    assert body["message"] == "Repository updated successfully"
    assert body["repository"]["autoUpdate"] is True
    assert body["repository"]["branch"] == "develop"
    assert body["repository"]["name"] == "billing"


def test_unknown_repository_is_404(harness: _Harness) -> None:
    assert harness.client.get("/repositories/9").status_code == 404
    assert harness.client.put("/repositories/9", json={"name": "x"}).status_code == 404
    assert harness.client.delete("/repositories/9").status_code == 404
    response = harness.client.post(
        "/repositories/update-status", json={"url": "https://github.com/acme/none.git"}
    )
    assert response.status_code == 404


def test_update_status_by_url(harness: _Harness) -> None:
    harness.register()

    response = harness.client.post(
        "/repositories/update-status", json={"url": REPO_URL, "status": "outdated"}
    )

    assert response.status_code == 200
    body = response.json()
    assert body["repository"]["status"] == "outdated"
    assert body["repository"]["hasDocumentation"] is True


def test_update_status_rejects_unknown_status(harness: _Harness) -> None:
    harness.register()

    response = harness.client.post(
        "/repositories/update-status", json={"url": REPO_URL, "status": "done"}
    )

    assert response.status_code == 400
    assert "done" in response.json()["detail"]
    assert harness.client.get("/repositories/1").json()["repository"]["status"] == "up-to-date"


def test_delete_repository_removes_documentation(harness: _Harness) -> None:
    harness.register()
    assert (harness.docs_dir / "shop-1.md").exists()

    response = harness.client.delete("/repositories/1")

    assert response.status_code == 200
    assert response.json() == {"success": True, "message": "Repository deleted successfully"}
    assert not (harness.docs_dir / "shop-1.md").exists()
    assert harness.client.get("/documentation/1").status_code == 404


def test_generate_rejects_unsupported_url(harness: _Harness) -> None:
    response = harness.client.post(
        "/generate", json={"repoUrl": "https://example.com/shop", "apiKey": "key"}
    )

    assert response.status_code == 400
    assert harness.orchestrator.calls == []


def test_generate_requires_api_key(harness: _Harness) -> None:
    response = harness.client.post("/generate", json={"repoUrl": REPO_URL})

    assert response.status_code == 422


def test_generate_reports_unavailable_repository(harness: _Harness) -> None:
    harness.orchestrator.error = RepositoryAnalysisFailed(
        "Repository unavailable: branch missing",
        cause=FetchFailed(REPO_URL, "nope", "Remote branch nope not found"),
    )

    response = harness.client.post(
        "/generate", json={"repoUrl": REPO_URL, "apiKey": "key", "branch": "nope"}
    )

    assert response.status_code == 422
    assert "branch missing" in response.json()["detail"]
    assert harness.orchestrator.calls == [(REPO_URL, "nope")]


def test_generate_hides_internal_analysis_errors(harness: _Harness) -> None:
    harness.orchestrator.error = RepositoryAnalysisFailed(
        "Repository analysis failed: disk full", cause=OSError("disk full")
    )

    response = harness.client.post("/generate", json={"repoUrl": REPO_URL, "apiKey": "key"})

    assert response.status_code == 500
    assert response.json() == {"detail": "Repository analysis failed"}


def test_generate_returns_documentation(harness: _Harness) -> None:
    response = harness.client.post("/generate", json={"repoUrl": REPO_URL, "apiKey": "secret"})

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["documentation"] == "# shop\n"
    assert body["repoName"] == "shop"
    assert body["usedFallback"] is False
    assert harness.api_keys == ["secret"]

    generation_id = body["generationId"]
    assert harness.client.get(f"/status/{generation_id}").json()["status"] == "completed"
    doc = harness.client.get(f"/documentation/{generation_id}").json()
    assert doc["documentation"] == "# shop\n"
    assert doc["source"] == "memory"
    assert doc["filename"] is None


def test_generate_links_registered_repository(harness: _Harness) -> None:
    harness.register()
    harness.client.post("/repositories/update-status", json={"url": REPO_URL, "status": "outdated"})

    response = harness.client.post(
        "/generate", json={"repoUrl": REPO_URL, "apiKey": "secret", "repoId": "1"}
    )

    assert response.status_code == 200
    stored = harness.client.get("/repositories/1").json()["repository"]
    assert stored["status"] == "up-to-date"
    doc = harness.client.get("/documentation/1").json()
    assert doc["source"] == "file"
    assert doc["filename"] == "shop-1.md"
    assert doc["generatedAt"] == stored["lastUpdated"]


def test_store_and_download_documentation(harness: _Harness) -> None:
    stored = harness.client.post("/documentation/draft-7", json={"documentation": "# Draft\n"})
    assert stored.json() == {"success": True, "message": "Documentation stored successfully"}

    response = harness.client.get("/documentation/draft-7/download")

    assert response.status_code == 200
    assert response.text == "# Draft\n"
    assert response.headers["content-type"].startswith("text/markdown")
    assert response.headers["content-disposition"] == 'attachment; filename="draft-7.md"'


def test_missing_documentation_is_404(harness: _Harness) -> None:
    response = harness.client.get("/documentation/unknown")

    assert response.status_code == 404
    assert response.json() == {"detail": "Documentation not found"}
    assert harness.client.get("/documentation/unknown/download").status_code == 404


def test_status_round_trip(harness: _Harness) -> None:
    missing = harness.client.get("/status/job-1").json()
    assert missing["status"] == "not_found"
    assert missing["message"] == "Generation not found"

    response = harness.client.post("/status/job-1", json={"status": "generating", "progress": 40})
    assert response.json()["message"] == "Status updated"

    current = harness.client.get("/status/job-1").json()
    assert current["status"] == "generating"
    assert current["message"] == "Processing..."
    assert current["progress"] == 40
    assert current["updatedAt"].endswith("Z")


def test_memory_backend_serves_documentation_from_memory(tmp_path: Path) -> None:
    harness = _Harness(tmp_path, backend="memory")
    harness.register()

    stored = harness.client.get("/repositories/1").json()["repository"]
    doc = harness.client.get("/documentation/1").json()

    assert stored["documentationFile"] is None
    assert doc["source"] == "memory"
    assert doc["documentation"] == "# shop\n"
    assert not (tmp_path / "data").exists()

"""Tests for API specification discovery."""

from __future__ import annotations

from docweave.analyzers.api_specs import (
    GRAPHQL,
    MAX_SPEC_BYTES,
    OPENAPI,
    PREVIEW_CHARS,
    ApiSpecExtractor,
)


def test_openapi_and_graphql_specs_detected(repo_builder) -> None:
    openapi = "openapi: 3.0.0\ninfo:\n  title: Demo\n" + "# padding\n" * 100
    repo_builder.write(
        {
            "api/openapi.yaml": openapi,
            "schema.graphql": "type Query {\n  hello: String\n}\n",
        }
    )

    result = ApiSpecExtractor().extract(repo_builder.walk(), repo_builder.path())

    by_file = {spec.file: spec for spec in result}
    assert set(by_file) == {"api/openapi.yaml", "schema.graphql"}
    assert by_file["api/openapi.yaml"].type == OPENAPI
    assert by_file["api/openapi.yaml"].preview == openapi[:PREVIEW_CHARS]
    assert by_file["api/openapi.yaml"].size == len(openapi.encode("utf-8"))
    assert by_file["schema.graphql"].type == GRAPHQL


def test_candidates_without_markers_are_skipped(repo_builder) -> None:
    repo_builder.write(
        {
            "api-gateway.yml": "replicas: 3\n",
            "swagger.json": '{"swagger": "2.0", "paths": {}}',
        }
    )

    result = ApiSpecExtractor().extract(repo_builder.walk(), repo_builder.path())

    assert [spec.file for spec in result] == ["swagger.json"]


def test_unrelated_files_are_not_candidates(repo_builder) -> None:
    repo_builder.write({"docker-compose.yml": "openapi: not really\n"})

    assert ApiSpecExtractor().extract(repo_builder.walk(), repo_builder.path()) == ()


def test_specs_above_size_ceiling_are_skipped(repo_builder) -> None:
    oversized = "openapi: 3.0.0\n" + "x" * MAX_SPEC_BYTES
    repo_builder.write(
        {
            "openapi.yaml": oversized,
            "docs/swagger.yaml": "swagger: '2.0'\n",
        }
    )

    result = ApiSpecExtractor().extract(repo_builder.walk(), repo_builder.path())

    assert [spec.file for spec in result] == ["docs/swagger.yaml"]

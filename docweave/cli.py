"""CLI entrypoints for docweave commands."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

from .config import ConfigError, DocweaveConfig, load_config
from .errors import RepositoryAnalysisFailed
from .generator import DocumentationGenerator
from .git.fetcher import DEFAULT_BRANCH
from .llm.runner import LLMRunner
from .logging import configure_logging
from .orchestrator import AnalysisOrchestrator


def _add_verbose_option(
    parser: argparse.ArgumentParser, *, suppress_default: bool = False
) -> None:
    kwargs: dict[str, object] = {
        "action": "store_true",
        "help": "Increase log verbosity for troubleshooting.",
    }
    if suppress_default:
        kwargs["default"] = argparse.SUPPRESS
    else:
        kwargs["default"] = False
    parser.add_argument(
        "-v",
        "--verbose",
        **kwargs,
    )


def _add_repository_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("url", help="Git URL of the repository to analyze.")
    parser.add_argument(
        "--branch",
        default=DEFAULT_BRANCH,
        help=f"Branch to clone (defaults to {DEFAULT_BRANCH}).",
    )


def _add_config_option(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--config",
        type=Path,
        default=Path("."),
        help="Path to .docweave.yml or the directory containing it.",
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="docweave",
        description="Analyze Git repositories and generate service documentation.",
    )
    _add_verbose_option(parser)
    parser.add_argument(
        "--log-file",
        type=Path,
        default=None,
        help="Also write detailed logs to this file.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    analyze_parser = subparsers.add_parser(
        "analyze",
        help="Clone a repository and print its analysis as JSON.",
    )
    _add_verbose_option(analyze_parser, suppress_default=True)
    _add_repository_options(analyze_parser)
    _add_config_option(analyze_parser)

    generate_parser = subparsers.add_parser(
        "generate",
        help="Analyze a repository and generate markdown documentation.",
    )
    _add_verbose_option(generate_parser, suppress_default=True)
    _add_repository_options(generate_parser)
    _add_config_option(generate_parser)
    generate_parser.add_argument(
        "--api-key",
        default=None,
        help="API key for the chat-completion endpoint (overrides config and environment).",
    )
    generate_parser.add_argument(
        "--output",
        type=Path,
        default=None,
        help="Write markdown to this file instead of stdout.",
    )

    serve_parser = subparsers.add_parser(
        "serve",
        help="Run the HTTP service.",
    )
    _add_verbose_option(serve_parser, suppress_default=True)
    _add_config_option(serve_parser)
    serve_parser.add_argument("--host", default=None, help="Interface to bind.")
    serve_parser.add_argument("--port", type=int, default=None, help="Port to listen on.")

    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for docweave commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    configure_logging(verbose=bool(args.verbose), log_file=args.log_file)

    try:
        config = load_config(args.config)
    except ConfigError as exc:
        parser.exit(1, f"{exc}\n")

    if args.command == "analyze":
        orchestrator = AnalysisOrchestrator.from_config(config)
        try:
            result = orchestrator.analyze_repository(args.url, args.branch)
        except RepositoryAnalysisFailed as exc:
            parser.exit(1, f"docweave analyze failed: {exc}\nRun with --verbose for more details.\n")
        print(json.dumps(result.to_dict(), indent=2))
    elif args.command == "generate":
        orchestrator = AnalysisOrchestrator.from_config(config)
        try:
            result = orchestrator.analyze_repository(args.url, args.branch)
        except RepositoryAnalysisFailed as exc:
            parser.exit(1, f"docweave generate failed: {exc}\nRun with --verbose for more details.\n")
        generator = DocumentationGenerator(LLMRunner.from_config(config.llm, api_key=args.api_key))
        generated = generator.generate(result)
        if generated.used_fallback:
            print(f"LLM unavailable ({generated.error}); wrote template documentation.", file=sys.stderr)
        if args.output is None:
            print(generated.markdown)
        else:
            args.output.parent.mkdir(parents=True, exist_ok=True)
            args.output.write_text(generated.markdown, encoding="utf-8")
            print(f"Documentation written to {_relativize(args.output)}")
    elif args.command == "serve":
        _serve(config, args.host, args.port)
    else:  # pragma: no cover - argparse enforces choices
        parser.exit(1, "Unknown command\n")


def _serve(config: DocweaveConfig, host: str | None, port: int | None) -> None:  # pragma: no cover
    from .service.app import run_service

    run_service(config, host=host, port=port)


def _relativize(path: Path) -> str:
    try:
        return str(path.resolve().relative_to(Path.cwd()))
    except ValueError:
        return str(path)


if __name__ == "__main__":
    main(sys.argv[1:])

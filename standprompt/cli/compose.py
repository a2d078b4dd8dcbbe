"""Standalone CLI for composing a stand-generation prompt.

Usage::

    python -m standprompt.cli stand.yaml --base-prompt "Premium retail stand"
    python -m standprompt.cli stand.json --dimensional --view three-quarter
    python -m standprompt.cli stand.yaml --qa --json -o result.json

Reads a specification (YAML or JSON mapping), runs the four-tier
pipeline and writes the composed prompt to stdout.  The processing and
QA reports go to stderr so stdout can be piped straight into a
generator.  With ``--json`` a single JSON document carries the prompt
and all reports instead.

Exit codes: 0 on success, 1 when an escalation remains unresolved, 2 on
invalid input or configuration.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from standprompt.models.pipeline import PipelineOutput
from standprompt.models.specification import Specification
from standprompt.utils.errors import ConfigurationError, PipelineError, SpecificationError

EXIT_OK = 0
EXIT_ESCALATION = 1
EXIT_INVALID_INPUT = 2

_VIEW_CHOICES = ("front", "store", "three-quarter")
_SPEC_SUFFIXES = {".yaml", ".yml", ".json"}


# ---------------------------------------------------------------------------
# Input
# ---------------------------------------------------------------------------


def load_specification(path: Path) -> Specification:
    """Read and validate a specification file.

    Raises
    ------
    SpecificationError
        If the file is missing, has an unsupported extension, cannot be
        parsed, or does not describe a valid specification.
    """
    if not path.exists():
        raise SpecificationError(f"File not found: {path}")
    suffix = path.suffix.lower()
    if suffix not in _SPEC_SUFFIXES:
        raise SpecificationError(
            f"Unsupported file type: {suffix or '(none)'}. "
            f"Allowed: {', '.join(sorted(_SPEC_SUFFIXES))}"
        )

    text = path.read_text(encoding="utf-8")
    try:
        data = json.loads(text) if suffix == ".json" else yaml.safe_load(text)
    except (json.JSONDecodeError, yaml.YAMLError) as exc:
        raise SpecificationError(f"Cannot parse {path.name}: {exc}") from exc

    if not isinstance(data, dict):
        raise SpecificationError(f"{path.name} must contain a mapping of specification fields")
    try:
        return Specification.model_validate(data)
    except ValidationError as exc:
        raise SpecificationError(f"Invalid specification in {path.name}: {exc}") from exc


# ---------------------------------------------------------------------------
# Formatting helpers
# ---------------------------------------------------------------------------


def _format_json_output(output: PipelineOutput) -> str:
    document: dict[str, Any] = {
        "final_prompt": output.final_prompt,
        "fallback_applied": output.fallback_applied,
        "needs_escalation": output.needs_escalation,
        "result": output.result.model_dump(mode="json"),
    }
    if output.dimensional_analysis is not None:
        document["dimensional_analysis"] = output.dimensional_analysis.model_dump(mode="json")
    if output.qa_report is not None:
        document["qa_report"] = output.qa_report.model_dump(mode="json")
    return json.dumps(document, indent=2)


def _format_reports(output: PipelineOutput) -> str:
    # Deferred so --help does not pull in the whole pipeline.
    from standprompt.pipeline.orchestrator import format_processing_report
    from standprompt.services.end_to_end_qa import format_qa_report

    parts = [format_processing_report(output.result)]
    analysis = output.dimensional_analysis
    if analysis is not None and analysis.issues:
        parts.append("DIMENSIONAL ISSUES:\n" + "\n".join(f"- {i}" for i in analysis.issues))
    if output.fallback_applied:
        parts.append("FALLBACK: legacy compression applied to resolve escalation")
    if output.qa_report is not None:
        parts.append(format_qa_report(output.qa_report))
    return "\n\n".join(parts)


# ---------------------------------------------------------------------------
# Pipeline runner
# ---------------------------------------------------------------------------


async def _run(args: argparse.Namespace) -> int:
    """Load the inputs, run the pipeline and emit the results.

    Returns the process exit code.
    """
    from standprompt.config.loader import load_config
    from standprompt.main import run_pipeline

    try:
        config = load_config(args.config)
        spec = load_specification(Path(args.spec))
    except (SpecificationError, ConfigurationError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return EXIT_INVALID_INPUT

    try:
        output = await run_pipeline(
            spec,
            args.base_prompt or "",
            config=config,
            dimensional=args.dimensional,
            view_type=args.view,
            run_qa=args.qa,
            fallback=args.fallback,
        )
    except (PipelineError, ConfigurationError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return EXIT_INVALID_INPUT

    if args.json_output:
        text = _format_json_output(output)
    else:
        text = output.final_prompt
        print(_format_reports(output), file=sys.stderr)

    if args.output:
        Path(args.output).write_text(text, encoding="utf-8")
        print(f"Results written to: {args.output}", file=sys.stderr)
    else:
        print(text)

    if output.needs_escalation:
        print(
            "Escalation needed: form requirements did not survive compression",
            file=sys.stderr,
        )
        return EXIT_ESCALATION
    return EXIT_OK


# ---------------------------------------------------------------------------
# CLI entry point
# ---------------------------------------------------------------------------


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="python -m standprompt.cli",
        description=(
            "Compose a bounded-length image-generation prompt for a retail "
            "display stand from its specification."
        ),
    )
    parser.add_argument(
        "spec",
        type=str,
        help="Path to the stand specification (YAML or JSON).",
    )
    base = parser.add_mutually_exclusive_group()
    base.add_argument(
        "--base-prompt",
        type=str,
        default=None,
        help="Creative base prompt to build on.",
    )
    base.add_argument(
        "--dimensional",
        action="store_true",
        help="Build the base prompt from a dimensional analysis of the stand.",
    )
    parser.add_argument(
        "--view",
        choices=_VIEW_CHOICES,
        default="front",
        help="Camera view for the dimensional prompt (default: front).",
    )
    parser.add_argument(
        "--qa",
        action="store_true",
        help="Run end-to-end quality assurance on the result.",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        dest="json_output",
        help="Output the prompt and reports as one JSON document.",
    )
    parser.add_argument(
        "--output", "-o",
        type=str,
        default=None,
        help="Write the output to a file instead of stdout.",
    )
    parser.add_argument(
        "--fallback",
        action="store_true",
        help="On escalation, retry with the legacy compressor.",
    )
    parser.add_argument(
        "--config",
        type=str,
        default="config/config.yaml",
        help="Path to the YAML configuration file.",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default=None,
        help="Override the configured log level (e.g. DEBUG, WARNING).",
    )
    return parser


def _resolve_log_level(args: argparse.Namespace) -> str:
    """Pick the log level: ``--log-level``, then quiet JSON, then the config file."""
    from standprompt.config import settings
    from standprompt.config.loader import load_config

    if args.log_level:
        return args.log_level
    if args.json_output:
        return "WARNING"
    try:
        return str(load_config(args.config)["logging"]["level"])
    except ConfigurationError:
        # _run reports the broken config; log at the environment level meanwhile.
        return settings.log_level


def main(argv: list[str] | None = None) -> None:
    """CLI entry point.

    Logging is configured onto stderr before the pipeline modules are
    imported, since structlog caches loggers on first use.
    """
    from standprompt.utils.logging import configure_logging

    parser = _build_parser()
    args = parser.parse_args(argv)

    configure_logging(log_level=_resolve_log_level(args), stream=sys.stderr)

    exit_code = asyncio.run(_run(args))
    sys.exit(exit_code)


if __name__ == "__main__":
    main()

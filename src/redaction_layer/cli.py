"""CLI interface for the PII redaction layer.

Usage:
    # Redact a file (stdout: RedactionResult JSON with camelCase keys)
    redaction-layer redact transcript.txt --category transcript

    # Redact stdin using only the regex detector (no LLM calls)
    echo 'Mail me at jane@example.com' | redaction-layer redact --patterns-only

    # Check that the configured LLM provider is reachable
    redaction-layer health

Settings come from the environment / .env (see redaction_layer.config);
flags override individual values. Logs go to stderr.
"""

import argparse
import asyncio
import json
import sys
from pathlib import Path
from typing import Optional

from redaction_layer.config import Settings
from redaction_layer.logging_config import configure_logging
from redaction_layer.pipeline.orchestrator import RedactionPipeline


def _build_settings(args: argparse.Namespace) -> Settings:
    overrides = {}
    if getattr(args, "patterns_only", False):
        overrides["ENABLE_CONTEXT_DETECTION"] = False
    if getattr(args, "strategy", None):
        overrides["REDACTION_STRATEGY"] = args.strategy
    if getattr(args, "provider", None):
        overrides["LLM_PROVIDER"] = args.provider
    if args.log_level:
        overrides["LOG_LEVEL"] = args.log_level
    return Settings(**overrides)


def _read_input(path: Optional[str]) -> str:
    if path is None or path == "-":
        return sys.stdin.read()
    return Path(path).read_text(encoding="utf-8")


async def _redact(settings: Settings, text: str, category: str) -> dict:
    async with RedactionPipeline(settings) as pipeline:
        result = await pipeline.redact(text, category)
    return result.model_dump(by_alias=True, mode="json")


async def _health(settings: Settings) -> bool:
    async with RedactionPipeline(settings) as pipeline:
        return await pipeline.health_check()


def cmd_redact(args: argparse.Namespace, settings: Settings) -> int:
    """Redact a document from a file or stdin (already read into ``args.text``)."""
    output = asyncio.run(_redact(settings, args.text, args.category))

    if args.no_entities:
        output.pop("entities", None)

    json.dump(output, sys.stdout, ensure_ascii=False, indent=args.indent)
    sys.stdout.write("\n")
    return 1 if output["degraded"] and args.fail_on_degraded else 0


def cmd_health(args: argparse.Namespace, settings: Settings) -> int:
    """Report whether the configured provider answers."""
    healthy = asyncio.run(_health(settings))
    json.dump({"healthy": healthy, "provider": settings.LLM_PROVIDER}, sys.stdout)
    sys.stdout.write("\n")
    return 0 if healthy else 1


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="redaction-layer",
        description="Detect and redact PII in long documents",
    )
    parser.add_argument("--log-level", default=None, help="Override LOG_LEVEL")
    parser.add_argument("--provider", choices=["ollama", "openai"], default=None, help="Override LLM_PROVIDER")

    sub = parser.add_subparsers(dest="command", required=True)

    redact = sub.add_parser("redact", help="Redact a document (file or stdin)")
    redact.add_argument("input", nargs="?", default=None, help="Input file, '-' or omitted for stdin")
    redact.add_argument("--category", default="unknown", help="Document category tag")
    redact.add_argument("--patterns-only", action="store_true", help="Regex detection only, no LLM calls")
    redact.add_argument("--strategy", choices=["replace", "hash", "mask"], default=None, help="Placeholder style")
    redact.add_argument("--no-entities", action="store_true", help="Omit the entity list (it holds raw values)")
    redact.add_argument("--indent", type=int, default=None, help="Pretty-print JSON output")
    redact.add_argument("--fail-on-degraded", action="store_true", help="Exit 1 when the result is degraded")

    sub.add_parser("health", help="Check LLM provider reachability")
    return parser


def main(argv: Optional[list[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command == "redact":
        try:
            args.text = _read_input(args.input)
        except OSError as e:
            parser.error(f"cannot read {args.input}: {e.strerror or e}")

    settings = _build_settings(args)
    configure_logging(log_level=settings.LOG_LEVEL, environment=settings.ENVIRONMENT)

    commands = {
        "redact": cmd_redact,
        "health": cmd_health,
    }
    return commands[args.command](args, settings)


if __name__ == "__main__":
    sys.exit(main())

from __future__ import annotations

import argparse
import asyncio
import json
import sys

from studbud.core.logging import setup_logging
from studbud.modules.generation.errors import GenerationError
from studbud.modules.generation.export import render_text, to_jsonable
from studbud.modules.generation.gate import InsufficientContent
from studbud.modules.generation.models.items import GenerationMode
from studbud.modules.generation.models.payload import (
    FileInput,
    PastedText,
    RawInput,
    TopicInput,
)
from studbud.modules.generation.orchestrator import GenerationOrchestrator
from studbud.modules.generation.providers import build_adapter

EXIT_ERROR = 1
EXIT_INSUFFICIENT = 3


def _load_input(args: argparse.Namespace) -> RawInput:
    given = [x for x in (args.text, args.file, args.topic) if x]
    if len(given) != 1:
        raise SystemExit("Provide exactly one of --text, --file or --topic")
    if args.file:
        return FileInput.from_path(args.file)
    if args.topic:
        return TopicInput(topic=args.topic)
    return PastedText(text=args.text)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="studbud-gen", description="Study material generator CLI"
    )
    sub = parser.add_subparsers(dest="cmd", required=True)

    g = sub.add_parser("generate", help="Generate flashcards or a quiz")
    g.add_argument("--text", "-t", help="Study text (pasted)")
    g.add_argument("--file", "-f", help="Path to a file to study from")
    g.add_argument("--topic", help="Bare topic to research")
    g.add_argument(
        "--mode",
        "-m",
        choices=[m.value.lower() for m in GenerationMode],
        default="flashcards",
    )
    g.add_argument("--count", "-n", type=int, default=10, help="Items (1-100)")
    g.add_argument(
        "--search", action="store_true", help="Enable web search augmentation"
    )
    g.add_argument(
        "--format", choices=["json", "text"], default="json", help="Output format"
    )

    args = parser.parse_args(argv)
    setup_logging()

    if args.cmd == "generate":
        try:
            raw = _load_input(args)
        except OSError as exc:
            print(f"ReadError: {exc}", file=sys.stderr)
            return EXIT_ERROR
        orchestrator = GenerationOrchestrator(build_adapter())
        try:
            outcome = asyncio.run(
                orchestrator.orchestrate(raw, args.mode, args.count, args.search)
            )
        except GenerationError as exc:
            print(f"{exc.kind}: {exc.message}", file=sys.stderr)
            return EXIT_ERROR

        if isinstance(outcome, InsufficientContent):
            print(
                "The content provided is too brief to generate a quality study set. "
                "Re-run with --search to research it on the internet instead.",
                file=sys.stderr,
            )
            return EXIT_INSUFFICIENT

        if args.format == "text":
            print(render_text(outcome))
        else:
            print(json.dumps(to_jsonable(outcome), indent=2))
        return 0

    parser.print_help()
    return 2


if __name__ == "__main__":
    raise SystemExit(main())

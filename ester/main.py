"""
Command-line entry point: stream one assistant reply to stdout.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from dataclasses import asdict
from pathlib import Path
from typing import Any

import structlog
import yaml

from ester.config import Configuration
from ester.llm import LLMError, ResponsesClient
from ester.logging_utils import configure_logging, operation_context
from ester.prompt import ChatMessage

logger = structlog.get_logger(__name__)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="ester-chat",
        description="Stream a reply from the Ester assistant.",
    )
    parser.add_argument("message", help="user message to send")
    parser.add_argument(
        "--history",
        type=Path,
        help="JSON file with earlier messages ([{\"content\": ..., \"isAI\": ...}])",
    )
    parser.add_argument(
        "--health-data", type=Path, help="JSON file with the latest health data"
    )
    parser.add_argument("--prefix", default="", help="system prompt prefix")
    parser.add_argument("--api-key", help="overrides OPENAI_API_KEY")
    parser.add_argument("--config", help="path to an alternative config.yaml")
    return parser.parse_args(argv)


def _load_json(path: Path | None) -> Any:
    if path is None:
        return None
    return json.loads(path.read_text(encoding="utf-8"))


def load_messages(args: argparse.Namespace) -> list[ChatMessage]:
    history = _load_json(args.history) or []
    messages = [ChatMessage.model_validate(item) for item in history]
    messages.append(ChatMessage(content=args.message))
    return messages


def report_error(error: Exception) -> int:
    """Print a one-line error for the user and return the exit status."""
    print(f"Error: {error}", file=sys.stderr)
    return 1


async def run(args: argparse.Namespace, config: Configuration) -> int:
    """Stream the reply, writing each delta as it arrives."""
    try:
        provider = config.provider_config()
        messages = load_messages(args)
        health_data = _load_json(args.health_data)
    except (OSError, ValueError) as e:
        return report_error(e)

    async with ResponsesClient(provider) as client:
        try:
            async with operation_context(
                "ester.chat", context={"model": provider.model}
            ) as op_logger:
                stream = await client.stream_chat(
                    messages,
                    health_data=health_data,
                    api_key=args.api_key,
                    system_prompt_prefix=args.prefix,
                )
                async with stream:
                    async for delta in stream:
                        sys.stdout.write(delta)
                        sys.stdout.flush()
                op_logger.debug("Reply finished", **asdict(stream.stats))
        except LLMError as e:
            sys.stdout.write("\n")
            return report_error(e)

    sys.stdout.write("\n")
    return 0


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = parse_args(argv)
    try:
        config = Configuration(args.config)
        configure_logging(config.get_logging_config()["level"])
    except (OSError, ValueError, yaml.YAMLError) as e:
        return report_error(e)

    try:
        return asyncio.run(run(args, config))
    except KeyboardInterrupt:
        logger.info("Interrupted, stream cancelled")
        return 130


if __name__ == "__main__":
    sys.exit(main())

"""Command-line front end for the Wingman provider gateway.

Lets you ask a question, answer a problem description, analyse screenshots
or an audio clip, list local models and check connectivity without the
desktop app. Provider settings come from the environment (.env supported).
"""

import argparse
import asyncio
import json
import sys
from typing import List, Optional

from dotenv import load_dotenv

from wingman.errors import GatewayError
from wingman.factory import config_from_env, create_gateway
from wingman.utils import setup_logging

load_dotenv()

logger = setup_logging("wingman.cli")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="wingman", description="Spoken interview answers from Gemini or Ollama.")
    parser.add_argument("--provider", choices=["gemini", "ollama"], default=None,
                        help="Override USE_OLLAMA from the environment")
    parser.add_argument("--model", default=None, help="Ollama model name (local provider only)")
    parser.add_argument("--ollama-url", default=None, help="Ollama base URL")
    parser.add_argument("--json", action="store_true", help="Print answers as {text, timestamp} JSON")

    sub = parser.add_subparsers(dest="command", required=True)

    ask = sub.add_parser("ask", help="Send a raw message")
    ask.add_argument("text")

    solve = sub.add_parser("solve", help="Answer a problem description stored as JSON")
    solve.add_argument("problem_file")

    image = sub.add_parser("image", help="Answer the question shown in one or more screenshots")
    image.add_argument("paths", nargs="+")

    audio = sub.add_parser("audio", help="Answer a recorded question")
    audio.add_argument("path")

    sub.add_parser("models", help="List installed Ollama models")
    sub.add_parser("test", help="Check the active provider")
    return parser


async def run(args: argparse.Namespace) -> int:
    config = config_from_env(provider=args.provider)
    if args.model:
        config.local_model = args.model
    if args.ollama_url:
        config.local_endpoint = args.ollama_url

    gateway = await create_gateway(config)

    if args.command == "models":
        for name in await gateway.list_local_models():
            print(name)
        return 0

    if args.command == "test":
        status = await gateway.test_connection()
        if status.ok:
            print(f"OK: {gateway.current_provider} ({gateway.current_model})")
            return 0
        print(f"FAILED: {status.error}", file=sys.stderr)
        return 1

    if args.command == "ask":
        print(await gateway.chat(args.text))
        return 0

    if args.command == "solve":
        with open(args.problem_file, "r", encoding="utf-8") as f:
            problem_info = json.load(f)
        result = await gateway.generate_solution(problem_info)
    elif args.command == "image":
        if len(args.paths) == 1:
            result = await gateway.analyze_image_file(args.paths[0])
        else:
            result = await gateway.extract_problem_from_images(args.paths)
    else:
        result = await gateway.analyze_audio_file(args.path)

    print(json.dumps(result.to_dict()) if args.json else result.text)
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        return asyncio.run(run(args))
    except (GatewayError, OSError, ValueError) as e:
        logger.error(f"{e}")
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())

"""
Command-line adapter for the image playground.

Architectural role:
- `serve`: run the HTTP API under uvicorn.
- `generate`: run one image prediction from the terminal and print the result.
- `refine`: refine one prompt from the terminal.

Request lifecycle (`generate` / `refine`):
1. Build a request body from command-line flags (same shape the browser sends).
2. Load and validate `Settings` from the environment.
3. Delegate to the service layer and print the JSON result to stdout.

Error handling strategy:
- `PlaygroundError` subclasses print `{error, details?}` to stderr and exit 1.
- Keyboard interrupts exit 130 without traceback output.
"""

import argparse
import json
import logging
import sys

import uvicorn

from playground.api.http_api import create_app
from playground.core.errors import PlaygroundError
from playground.image.poller import PredictionPoller
from playground.image.service import generate_image
from playground.llm.provider_config import NANO_BANANA, SEEDREAM, Settings
from playground.llm.service import refine_prompt


def configure_logging(debug: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="playground", description="Image playground proxy")
    subparsers = parser.add_subparsers(dest="command", required=True)

    serve = subparsers.add_parser("serve", help="Run the HTTP API")
    serve.add_argument("--host", default=None)
    serve.add_argument("--port", type=int, default=None)

    generate = subparsers.add_parser("generate", help="Run one image prediction")
    generate.add_argument("prompt")
    generate.add_argument("--model", dest="model_key", choices=[SEEDREAM, NANO_BANANA])
    generate.add_argument("--size")
    generate.add_argument("--width")
    generate.add_argument("--height")
    generate.add_argument("--aspect-ratio", dest="aspect_ratio")
    generate.add_argument("--sequential", dest="sequential_image_generation")
    generate.add_argument("--max-images", dest="max_images")
    generate.add_argument("--output-format", dest="output_format")
    generate.add_argument(
        "--image", dest="image_input", action="append", help="Image URL or data URI (repeatable)"
    )

    refine = subparsers.add_parser("refine", help="Refine an image prompt")
    refine.add_argument("prompt")

    return parser


def body_from_args(args) -> dict:
    """Collect the flags that were actually given into a request body."""
    fields = (
        "model_key",
        "prompt",
        "size",
        "width",
        "height",
        "aspect_ratio",
        "sequential_image_generation",
        "max_images",
        "output_format",
        "image_input",
    )
    return {name: getattr(args, name) for name in fields if getattr(args, name, None) is not None}


def main(argv=None, settings: Settings | None = None, poller=None) -> int:
    args = build_parser().parse_args(argv)

    try:
        if settings is None:
            settings = Settings.from_env()
        configure_logging(settings.debug)

        if args.command == "serve":
            app = create_app(settings, poller)
            uvicorn.run(app, host=args.host or settings.host, port=args.port or settings.port)
            return 0

        settings.validate()
        if poller is None:
            poller = PredictionPoller.from_settings(settings)

        if args.command == "generate":
            result = generate_image(body_from_args(args), settings, poller)
        else:
            result = refine_prompt({"prompt": args.prompt}, settings, poller)

    except PlaygroundError as err:
        print(json.dumps(err.to_dict(), indent=2), file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        print("\nInterrupted.", file=sys.stderr)
        return 130

    print(json.dumps(result, indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())

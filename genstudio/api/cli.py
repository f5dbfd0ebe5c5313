"""
Developer CLI for the GenStudio adapter.

Architectural role:
- Exposes every adapter operation from a terminal for manual checks.
- Delegates all request shaping and model calls to `genstudio.llm.service`
  and `genstudio.image.service`.

Commands:
- `chat`: interactive streamed chat that keeps history between turns.
- `image`: text-to-image, written to PNG files.
- `edit`: image edit from a local file, written to PNG files.
- `slides`: structured slide outline printed as JSON.
- `stock`: grounded research report plus cited sources.

Chat control commands:
- `exit`/`quit` ends the session.
- `clear chat` drops the accumulated history.
- `/attach <path>` queues a file for the next turn.

Error handling strategy:
- Attachment validation errors are reported and the turn is skipped.
- Request failures in one chat turn are reported and the session continues.
- EOF and keyboard interrupts terminate the chat loop without a traceback.
- Service errors from one-shot commands propagate and exit non-zero.
"""

from dotenv import load_dotenv

load_dotenv()

import argparse
import asyncio
import base64
import json
import logging
import os
import sys

import httpx

from genstudio.api.multimodal.file_input_manager import (
    build_message_parts,
    load_attachment,
    load_attachments,
)
from genstudio.image.service import edit_image, generate_image
from genstudio.llm.errors import GenStudioError
from genstudio.llm.provider_config import CHAT_MODEL, ImageSize
from genstudio.llm.service import analyze_stock, generate_slide_content, stream_chat
from genstudio.llm.types import ConversationTurn, GroundingOptions, TextPart


# =========================================================
# UTF-8 SAFE OUTPUT
# =========================================================

if hasattr(sys.stdout, "reconfigure"):
    try:
        sys.stdout.reconfigure(encoding="utf-8", errors="ignore")
    except (AttributeError, ValueError):
        pass


# =========================================================
# OUTPUT HELPERS
# =========================================================

def write_images(images, output_prefix):
    """Decode PNG data URIs to `<prefix>-<n>.png` files and return the paths."""
    paths = []
    for index, uri in enumerate(images, start=1):
        _, payload = uri.split(",", 1)
        path = f"{output_prefix}-{index}.png"
        with open(path, "wb") as f:
            f.write(base64.b64decode(payload))
        paths.append(path)
    return paths


def read_image_as_data_uri(path):
    """Load a local image file and return it as a data URI."""
    attachment = load_attachment(path)
    if not attachment.mime_type.startswith("image/"):
        raise ValueError(f"Not an image file: {path}")
    return f"data:{attachment.mime_type};base64,{attachment.data}"


# =========================================================
# CHAT LOOP
# =========================================================

async def run_chat(model, search, initial_attachments):
    """Interactive streamed chat with in-memory history."""
    history = []
    pending = list(initial_attachments)
    grounding = GroundingOptions(search=search)

    print(f"Chat with {model} (search grounding: {'on' if search else 'off'})")
    print("Type 'exit' to quit, 'clear chat' to reset, '/attach <path>' to add a file.\n")

    while True:
        try:
            question = input("You: ").strip()
        except (EOFError, KeyboardInterrupt):
            print()
            return

        if not question and not pending:
            continue

        if question.lower() in ("exit", "quit"):
            return

        if question.lower() in ("clear chat", "empty chat"):
            history.clear()
            pending.clear()
            print("History cleared.\n")
            continue

        if question.startswith("/attach "):
            try:
                pending.append(load_attachment(question[len("/attach "):].strip()))
                print(f"Attached {pending[-1].name}\n")
            except ValueError as e:
                print(f"Attachment rejected: {e}\n")
            continue

        parts = build_message_parts(question, pending)
        stream = await stream_chat(model, history, question, pending, grounding)

        print("AI: ", end="", flush=True)
        answer = []
        try:
            async for chunk in stream:
                answer.append(chunk)
                print(chunk, end="", flush=True)
        except (httpx.HTTPError, GenStudioError) as e:
            print(f"\nRequest failed: {e}\n")
            continue
        print("\n")

        history.append(ConversationTurn(role="user", parts=tuple(parts)))
        if answer:
            history.append(ConversationTurn(role="model", parts=(TextPart("".join(answer)),)))
        pending.clear()


# =========================================================
# ONE-SHOT COMMANDS
# =========================================================

async def run_image(prompt, size, output_prefix):
    images = await generate_image(prompt, size)
    if not images:
        print("No images returned.")
        return
    for path in write_images(images, output_prefix):
        print(path)


async def run_edit(image_path, prompt, output_prefix):
    images = await edit_image(read_image_as_data_uri(image_path), prompt)
    if not images:
        print("No images returned.")
        return
    for path in write_images(images, output_prefix):
        print(path)


async def run_slides(topic, count):
    structure = await generate_slide_content(topic, count)
    if structure is None:
        print("No slide content returned.")
        return
    print(json.dumps(structure.to_wire(), indent=2, ensure_ascii=False))


async def run_stock(ticker):
    result = await analyze_stock(ticker)
    print(result.text or "No analysis returned.")

    sources = result.grounding_sources()
    if sources:
        print("\nSources:")
        for source in sources:
            print(f"- {source['title']}: {source['uri']}")


# =========================================================
# MAIN
# =========================================================

def build_parser():
    parser = argparse.ArgumentParser(prog="genstudio", description="GenStudio Gemini adapter CLI")
    sub = parser.add_subparsers(dest="command", required=True)

    chat = sub.add_parser("chat", help="Interactive streamed chat")
    chat.add_argument("--model", default=CHAT_MODEL)
    chat.add_argument("--search", action="store_true", help="Enable Google Search grounding")
    chat.add_argument("--attach", action="append", default=[], metavar="PATH")

    image = sub.add_parser("image", help="Generate an image")
    image.add_argument("prompt")
    image.add_argument("--size", choices=[s.value for s in ImageSize], default=ImageSize.SIZE_1K.value)
    image.add_argument("--output", default="image")

    edit = sub.add_parser("edit", help="Edit an existing image")
    edit.add_argument("image")
    edit.add_argument("prompt")
    edit.add_argument("--output", default="edited")

    slides = sub.add_parser("slides", help="Generate a slide outline")
    slides.add_argument("topic")
    slides.add_argument("--count", type=int, default=5)

    stock = sub.add_parser("stock", help="Grounded equity research report")
    stock.add_argument("ticker")

    return parser


def main(argv=None):
    logging.basicConfig(level=os.getenv("LOG_LEVEL", "WARNING").upper())
    args = build_parser().parse_args(argv)

    if args.command == "chat":
        try:
            attachments = load_attachments(args.attach)
        except ValueError as e:
            print(f"Attachment rejected: {e}", file=sys.stderr)
            return 2
        asyncio.run(run_chat(args.model, args.search, attachments))
    elif args.command == "image":
        asyncio.run(run_image(args.prompt, ImageSize(args.size), args.output))
    elif args.command == "edit":
        asyncio.run(run_edit(args.image, args.prompt, args.output))
    elif args.command == "slides":
        asyncio.run(run_slides(args.topic, args.count))
    elif args.command == "stock":
        asyncio.run(run_stock(args.ticker.upper()))
    return 0


if __name__ == "__main__":
    sys.exit(main())

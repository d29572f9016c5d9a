#!/usr/bin/env python3
"""Talk to the reply pipeline from the terminal.

Renders replies the way the chat widget does (paragraphs, bullet lists,
subheadings and the contact buttons) without running the HTTP server.

Usage examples:
    # Interactive session with the configured settings
    uv run python scripts/chat.py

    # Force explicit mode routing
    uv run python scripts/chat.py --routing

    # One-shot question, print the raw reply text as well
    uv run python scripts/chat.py --once "料金について教えてください" --raw
"""

import argparse
import asyncio
import sys
from pathlib import Path

# Allow running from project root
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from solution_chat.config import settings
from solution_chat.reply import (
    Message,
    ReplyOrchestrator,
    Role,
    inline_spans,
    parse_reply_blocks,
)

GREETING = "こんにちは。今日はどの課題からご一緒しますか？"


def _inline(text: str) -> str:
    """Render inline bold with ANSI codes on a terminal, plain text otherwise."""
    bold = sys.stdout.isatty()
    return "".join(
        f"\033[1m{segment}\033[0m" if strong and bold else segment
        for segment, strong in inline_spans(text)
    )


def render(text: str) -> str:
    """Format a reply for the terminal."""
    rendered = parse_reply_blocks(text)
    out: list[str] = []
    for block in rendered.blocks:
        if block.kind == "heading":
            out.append(f"【{_inline(block.items[0])}】")
        elif block.kind == "list":
            out.extend(f"  ・{_inline(item)}" for item in block.items)
        else:
            out.append(_inline(block.items[0]))
        out.append("")
    if rendered.show_contact:
        out.append(f"[無料相談フォーム] {settings.contact_form_url}")
        out.append(f"[電話で問い合わせ] {settings.contact_phone}")
    return "\n".join(out).rstrip()


async def run(args: argparse.Namespace) -> None:
    orchestrator = ReplyOrchestrator(use_explicit_routing=True if args.routing else None)
    history: list[Message] = [Message(role=Role.ASSISTANT, content=GREETING)]

    if args.once:
        history.append(Message(role=Role.USER, content=args.once))
        reply = await orchestrator.handle(history)
        if args.raw:
            print(reply.text)
            print("-" * 40)
        print(render(reply.text))
        return

    print(GREETING)
    while True:
        try:
            line = input("\n> ").strip()
        except EOFError:
            break
        if not line:
            continue
        if line in ("/quit", "/exit"):
            break
        history.append(Message(role=Role.USER, content=line))
        reply = await orchestrator.handle(history)
        history.append(Message(role=Role.ASSISTANT, content=reply.text))
        if args.raw:
            print(reply.text)
            print("-" * 40)
        print(render(reply.text))


def main() -> None:
    parser = argparse.ArgumentParser(description="Chat with the reply pipeline")
    parser.add_argument("--routing", action="store_true", help="Enable explicit mode routing")
    parser.add_argument("--once", metavar="TEXT", help="Send a single message and exit")
    parser.add_argument("--raw", action="store_true", help="Also print the unrendered reply")
    args = parser.parse_args()
    try:
        asyncio.run(run(args))
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    main()

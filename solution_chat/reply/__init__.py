"""Reply shaping pipeline: reshape, CTA detection and orchestration."""

from solution_chat.reply.blocks import (
    RenderedReply,
    ReplyBlock,
    inline_spans,
    parse_reply_blocks,
)
from solution_chat.reply.cta import CTA_MARKER, needs_contact
from solution_chat.reply.models import FormattedReply, Message, Role, parse_history
from solution_chat.reply.orchestrator import ReplyOrchestrator
from solution_chat.reply.reshape import reshape

__all__ = [
    "CTA_MARKER",
    "FormattedReply",
    "Message",
    "RenderedReply",
    "ReplyBlock",
    "ReplyOrchestrator",
    "Role",
    "inline_spans",
    "needs_contact",
    "parse_history",
    "parse_reply_blocks",
    "reshape",
]

"""Prompt context built from workspace content, and flashcard parsing."""

import re
import time
import uuid

from notecanvas.schemas.workspace import Block, Flashcard, Message

FLASHCARD_SEPARATOR = "---"
FALLBACK_FRONT = "Generated from workspace content"
FALLBACK_BACK_LENGTH = 200
RECENT_CHAT_TURNS = 5

_FRONT_RE = re.compile(r"Front:\s*(.+?)(?:\n|Back:)", re.DOTALL)
_BACK_RE = re.compile(r"Back:\s*(.+?)(?:\n|$)", re.DOTALL)

FLASHCARD_PROMPT = """Generate flashcards from the following content. Extract the most important concepts, definitions, formulas, or steps. Create short, focused flashcards (one idea per card).

Format each flashcard as:
Front: [Clear question, cue, or fill-in-the-blank]
Back: [Concise answer with optional tiny explanation/example]

Content to analyze:
{context}

Return ONLY the flashcards in this exact format (one flashcard per block):
---
Front: [question]
Back: [answer]
---"""


def new_id() -> str:
    """Client-generated identifier for blocks, messages and cards."""
    return uuid.uuid4().hex


def now_ms() -> int:
    return int(time.time() * 1000)


def describe_block(block: Block) -> str:
    """One line of prompt context for a block."""
    if block.type == "text":
        return f"Note ({block.title}): {block.content}"
    if block.type == "dataset":
        return f"Dataset ({block.title}): {block.description}"
    return f"Image ({block.title})"


def build_chat_context(blocks: list[Block]) -> str:
    return "\n".join(describe_block(block) for block in blocks)


def build_flashcard_context(blocks: list[Block], chat_history: list[Message]) -> str:
    """Notes plus the last few chat turns."""
    parts = [describe_block(block) for block in blocks]
    for message in chat_history[-RECENT_CHAT_TURNS:]:
        speaker = "User" if message.role == "user" else "AI"
        parts.append(f"{speaker}: {message.content}")
    return "\n\n".join(parts)


def note_question(title: str, content: str) -> str:
    """Chat prompt asking about a note, quoting its first two lines."""
    lines = [line for line in (content or "").split("\n") if line]
    preview = " ".join(lines[:2]).strip()
    snippet = f"{preview} ..." if preview else "(empty note)"
    return f'Question about note "{title}": {snippet}'


def parse_flashcards(text: str) -> list[Flashcard]:
    """Parse ``Front:``/``Back:`` blocks separated by ``---``.

    When nothing parses, the whole answer becomes one card so the user still
    gets something to study. An empty answer yields no cards.
    """
    if not text.strip():
        return []

    cards = []
    for chunk in text.split(FLASHCARD_SEPARATOR):
        front = _FRONT_RE.search(chunk)
        back = _BACK_RE.search(chunk)
        if front and back:
            cards.append(
                Flashcard(id=new_id(), front=front.group(1).strip(), back=back.group(1).strip())
            )

    if cards:
        return cards

    back = text[:FALLBACK_BACK_LENGTH]
    if len(text) > FALLBACK_BACK_LENGTH:
        back += "..."
    return [Flashcard(id=new_id(), front=FALLBACK_FRONT, back=back)]

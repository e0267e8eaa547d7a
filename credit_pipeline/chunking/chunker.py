"""Split oversized documents into bounded chunks on paragraph, then sentence, boundaries."""
from __future__ import annotations

import re

from pydantic import BaseModel

_PARAGRAPH_BREAK = re.compile(r"\n\s*\n")
_SENTENCE_BREAK = re.compile(r"(?<=[.!?])\s+")
_PARAGRAPH_SEP = "\n\n"
_SENTENCE_SEP = " "


class Chunk(BaseModel):
    """In-memory slice of a document. Never persisted."""

    index: int
    text: str


def _pack(parts: list[str], sep: str, limit: int) -> list[str]:
    """Greedily join parts with sep while the result stays within limit."""
    packed: list[str] = []
    current = ""
    for part in parts:
        if current and len(current) + len(sep) + len(part) > limit:
            packed.append(current)
            current = part
        else:
            current = f"{current}{sep}{part}" if current else part
    if current:
        packed.append(current)
    return packed


def split(text: str, max_chunk_chars: int) -> list[Chunk]:
    """
    Deterministic split of text into chunks of at most max_chunk_chars.
    A sentence longer than the limit forms a chunk on its own.
    Only boundary whitespace is lost between chunks.
    """
    if max_chunk_chars <= 0:
        raise ValueError("max_chunk_chars must be > 0")
    if len(text) <= max_chunk_chars:
        return [Chunk(index=0, text=text)]

    paragraphs = [p for p in _PARAGRAPH_BREAK.split(text) if p.strip()]
    pieces: list[str] = []
    for block in _pack(paragraphs, _PARAGRAPH_SEP, max_chunk_chars):
        if len(block) <= max_chunk_chars:
            pieces.append(block)
            continue
        sentences = [s for s in _SENTENCE_BREAK.split(block) if s]
        pieces.extend(_pack(sentences, _SENTENCE_SEP, max_chunk_chars))
    return [Chunk(index=i, text=piece) for i, piece in enumerate(pieces)]

from __future__ import annotations

import hashlib
import re

from ragbits_exchange.domain.models import Chunk

PARAGRAPH_SEPARATOR = "\n\n"

_SENT_SPLIT = re.compile(r"[.!?]+")


def content_hash(text: str) -> str:
    return hashlib.sha256(text.encode("utf-8")).hexdigest()


def chunk_content(content: str) -> list[Chunk]:
    """Split dataset text into paragraph chunks.

    Paragraphs are separated by a blank line (``"\\n\\n"``). Whitespace-only
    segments are dropped before ids are assigned, so ids are dense and stable
    for identical input.
    """
    paragraphs = [p.strip() for p in content.split(PARAGRAPH_SEPARATOR) if p.strip()]
    return [
        Chunk(id=idx, text=text, content_hash=content_hash(text))
        for idx, text in enumerate(paragraphs)
    ]


def split_into_sentences(text: str) -> list[str]:
    """Split on runs of sentence terminators; drops empty pieces."""
    return [s.strip() for s in _SENT_SPLIT.split(text) if s.strip()]

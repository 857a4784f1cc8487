# embedkit/infrastructure/chunkers/text_chunker.py
import structlog
from typing import List, Tuple
from pydantic import BaseModel

from embedkit.domain.models import ChunkStrategy

log = structlog.get_logger(__name__)

SENTENCE_TERMINATORS = frozenset(".!?")
PARAGRAPH_SEPARATOR = "\n\n"

class Chunker(BaseModel):
    """
    Splits text into pieces before embedding.

    `max_size` and `overlap` are measured in code points and only apply to the
    FIXED strategy. Every strategy except NONE trims (when `trim_space` is set)
    and drops empty chunks afterwards.
    """
    strategy: ChunkStrategy = ChunkStrategy.NONE
    max_size: int = 512
    overlap: int = 50
    trim_space: bool = True

    @classmethod
    def default(cls) -> "Chunker":
        return cls()

    def chunk(self, text: str) -> List[str]:
        if self.strategy == ChunkStrategy.NONE:
            return [text]

        if self.strategy == ChunkStrategy.SENTENCE:
            chunks = self._chunk_by_sentence(text)
        elif self.strategy == ChunkStrategy.PARAGRAPH:
            chunks = self._chunk_by_paragraph(text)
        elif self.strategy == ChunkStrategy.FIXED:
            chunks = self._chunk_by_fixed(text)
        else:
            chunks = [text]

        if self.trim_space:
            chunks = [c.strip() for c in chunks]

        return [c for c in chunks if c]

    def _chunk_by_sentence(self, text: str) -> List[str]:
        chunks: List[str] = []
        current: List[str] = []
        last = len(text) - 1
        for i, ch in enumerate(text):
            current.append(ch)
            if ch in SENTENCE_TERMINATORS and (i == last or text[i + 1].isspace()):
                chunks.append("".join(current))
                current = []

        if current:
            chunks.append("".join(current))
        return chunks

    def _chunk_by_paragraph(self, text: str) -> List[str]:
        return [p.strip() for p in text.split(PARAGRAPH_SEPARATOR) if p.strip()]

    def _chunk_by_fixed(self, text: str) -> List[str]:
        if self.max_size <= 0:
            # Misconfiguration degrades to a single chunk rather than failing.
            log.debug("Fixed chunking with non-positive max_size, returning text whole", max_size=self.max_size)
            return [text]
        if len(text) <= self.max_size:
            return [text]

        step = self.max_size - self.overlap
        if step <= 0:
            step = self.max_size

        chunks: List[str] = []
        for start in range(0, len(text), step):
            end = min(start + self.max_size, len(text))
            chunks.append(text[start:end])
            if end == len(text):
                break
        return chunks


def chunk_texts(chunker: Chunker, texts: List[str]) -> Tuple[List[str], List[int]]:
    """
    Chunks every text and flattens the result.

    Returns:
        A tuple of (chunks, mapping) where mapping[i] is the index of the input
        text that produced chunks[i]. Order is text order, then chunk order.
    """
    all_chunks: List[str] = []
    mapping: List[int] = []
    for text_index, text in enumerate(texts):
        chunks = chunker.chunk(text)
        all_chunks.extend(chunks)
        mapping.extend([text_index] * len(chunks))
    return all_chunks, mapping

from __future__ import annotations

from typing import List

from .ingest import DocumentChunk
from .vectorstore import VectorStore


class Retriever:
    """Similarity search with a fixed result count and score threshold."""

    def __init__(self, store: VectorStore, k: int = 3, score_threshold: float = 0.7) -> None:
        self.store = store
        self.k = k
        self.score_threshold = score_threshold

    def invoke(self, query: str) -> List[DocumentChunk]:
        results = self.store.search(query, k=self.k, score_threshold=self.score_threshold)
        return [r.chunk for r in results]


__all__ = ["Retriever"]

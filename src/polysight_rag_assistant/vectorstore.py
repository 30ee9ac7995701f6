from __future__ import annotations

import time
import uuid
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence, Union

from langchain_core.embeddings import Embeddings
from langchain_google_genai import GoogleGenerativeAIEmbeddings
from qdrant_client import QdrantClient
from qdrant_client.http import models

from .config import AppConfig
from .errors import VectorStoreConnectionError
from .ingest import DocumentChunk
from .logger import Logger

CONTENT_KEY = "page_content"
METADATA_KEY = "metadata"


@dataclass(frozen=True)
class Absent:
    pass


@dataclass(frozen=True)
class Empty:
    pass


@dataclass(frozen=True)
class Populated:
    points_count: int


CollectionState = Union[Absent, Empty, Populated]


@dataclass(frozen=True)
class ScoredChunk:
    score: float
    chunk: DocumentChunk


def create_embeddings(cfg: AppConfig) -> Embeddings:
    return GoogleGenerativeAIEmbeddings(
        model=cfg.embedding_model,
        google_api_key=cfg.google_api_key,
    )


class VectorStore:
    """
    Gateway to a single Qdrant collection.

    Chunks are embedded with the configured embeddings client and stored as
    points whose payload holds the chunk text and metadata. The collection is
    created lazily on the first insert, sized from the first embedding.
    """

    def __init__(
        self,
        client: QdrantClient,
        embeddings: Embeddings,
        collection_name: str,
        logger: Logger,
    ) -> None:
        self.client = client
        self.embeddings = embeddings
        self.collection_name = collection_name
        self.logger = logger

    @classmethod
    def connect(
        cls,
        cfg: AppConfig,
        logger: Logger,
        embeddings: Optional[Embeddings] = None,
        client: Optional[QdrantClient] = None,
    ) -> "VectorStore":
        logger.info("Connecting to Qdrant", {"url": cfg.qdrant_url})
        if client is None:
            client = QdrantClient(url=cfg.qdrant_url)
        try:
            client.get_collections()
        except Exception as exc:
            raise VectorStoreConnectionError(cfg.qdrant_url, exc) from exc
        logger.success("Qdrant client connected successfully!", {"url": cfg.qdrant_url})

        if embeddings is None:
            embeddings = create_embeddings(cfg)
        logger.success("Embeddings instance created successfully!", {"model": cfg.embedding_model})

        store = cls(client, embeddings, cfg.qdrant_collection, logger)
        logger.success("Vector store created successfully!", {"collection": cfg.qdrant_collection})
        return store

    # ---------------- Collection metadata ----------------

    def collection_state(self) -> CollectionState:
        if not self.client.collection_exists(self.collection_name):
            return Absent()
        info = self.client.get_collection(self.collection_name)
        count = info.points_count or 0
        self.logger.info(
            "Collection information",
            {"name": self.collection_name, "pointsCount": count, "status": str(info.status)},
        )
        if count == 0:
            return Empty()
        return Populated(points_count=count)

    def points_count(self) -> int:
        match self.collection_state():
            case Populated(points_count=count):
                return count
            case Absent() | Empty():
                return 0

    def delete_collection(self) -> None:
        self.client.delete_collection(self.collection_name)

    def _ensure_collection(self, vector_size: int) -> None:
        if self.client.collection_exists(self.collection_name):
            return
        self.logger.debug(f"Creating collection {self.collection_name} (size={vector_size})")
        self.client.create_collection(
            collection_name=self.collection_name,
            vectors_config=models.VectorParams(size=vector_size, distance=models.Distance.COSINE),
        )

    # ---------------- Writes ----------------

    def add_documents(self, chunks: Sequence[DocumentChunk]) -> List[str]:
        if not chunks:
            return []

        vectors = self.embeddings.embed_documents([c.text for c in chunks])
        self._ensure_collection(len(vectors[0]))

        ids = [str(uuid.uuid4()) for _ in chunks]
        points = [
            models.PointStruct(
                id=point_id,
                vector=list(vector),
                payload={CONTENT_KEY: chunk.text, METADATA_KEY: dict(chunk.metadata)},
            )
            for point_id, vector, chunk in zip(ids, vectors, chunks)
        ]
        self.client.upsert(collection_name=self.collection_name, points=points, wait=True)
        return ids

    def add_documents_in_batches(
        self,
        chunks: Sequence[DocumentChunk],
        batch_size: int = 10,
        delay: float = 1.0,
        sleep: Callable[[float], None] = time.sleep,
    ) -> int:
        """
        Insert chunks `batch_size` at a time, pausing `delay` seconds between batches
        to stay under the embedding API rate limit. Returns the number of chunks added.
        """
        total_batches = (len(chunks) + batch_size - 1) // batch_size
        added = 0
        for n, start in enumerate(range(0, len(chunks), batch_size), start=1):
            batch = chunks[start : start + batch_size]
            self.logger.info(f"Processing batch {n} / {total_batches} ({len(batch)} documents)")
            added += len(self.add_documents(batch))
            if n < total_batches:
                sleep(delay)
        return added

    # ---------------- Reads ----------------

    def search(self, query: str, k: int = 3, score_threshold: Optional[float] = None) -> List[ScoredChunk]:
        """
        Return up to `k` chunks most similar to `query`, best score first.

        `score_threshold` is inclusive: a chunk scoring exactly the threshold is
        returned. The cut is applied here rather than by Qdrant, whose local mode
        drops ties while the server keeps them.
        An absent collection yields an empty list.
        """
        if not self.client.collection_exists(self.collection_name):
            self.logger.warn(f"Collection {self.collection_name} does not exist")
            return []

        vector = self.embeddings.embed_query(query)
        response = self.client.query_points(
            collection_name=self.collection_name,
            query=list(vector),
            limit=k,
            with_payload=True,
        )

        results: List[ScoredChunk] = []
        for point in response.points:
            if score_threshold is not None and point.score < score_threshold:
                continue
            payload = point.payload or {}
            text = payload.get(CONTENT_KEY) or ""
            if not text.strip():
                continue
            chunk = DocumentChunk(text=text, metadata=dict(payload.get(METADATA_KEY) or {}))
            results.append(ScoredChunk(score=float(point.score), chunk=chunk))
        results.sort(key=lambda r: r.score, reverse=True)
        return results


def check_collection(store: VectorStore, logger: Logger) -> CollectionState:
    """Read the collection state, treating a failed metadata query as Absent."""
    try:
        return store.collection_state()
    except Exception as exc:
        # TODO: tell a missing collection apart from a transient query failure
        # before falling through to a full re-ingest.
        logger.error("Error fetching collection information:", exc)
        return Absent()


__all__ = [
    "Absent",
    "Empty",
    "Populated",
    "CollectionState",
    "ScoredChunk",
    "VectorStore",
    "create_embeddings",
    "check_collection",
]

"""
Shared test fixtures.

Provides: recording logger, keyword embeddings, scripted LLM, in-memory Qdrant store
Dependencies: pytest, qdrant_client, langchain_core
"""

import re
from pathlib import Path
from typing import Any, List

import pytest
from langchain_core.embeddings import Embeddings
from qdrant_client import QdrantClient

from polysight_rag_assistant.chain import FALLBACK_ANSWER
from polysight_rag_assistant.config import AppConfig
from polysight_rag_assistant.vectorstore import VectorStore

TOKEN_RE = re.compile(r"[a-z0-9]+")

# Each keyword pushes its text towards one topic axis.
TOPICS = {
    "requirements": 0, "requirement": 0, "requires": 0, "required": 0, "system": 0,
    "minimum": 0, "ram": 0, "memory": 0, "processor": 0, "disk": 0, "hardware": 0,
    "pricing": 1, "price": 1, "plan": 1, "plans": 1, "subscription": 1, "licence": 1,
    "cost": 1, "discount": 1,
    "support": 2, "help": 2, "email": 2, "contact": 2, "phone": 2,
    "install": 3, "installation": 3, "installer": 3, "download": 3, "package": 3,
    "data": 4, "sources": 4, "csv": 4, "postgresql": 4, "connect": 4, "connections": 4,
}
BIAS = 0.1

KNOWLEDGE_BASE = """System requirements: Polysight requires 8GB RAM and a 64-bit processor with four cores.

Pricing: the Team plan subscription covers twenty users and the Individual plan covers one.

Installation: download the installer from the portal and install the package as administrator.

Data sources: connect CSV files, PostgreSQL and other connections from the Data Sources panel.

Support: email help@polysight.com or phone the support line on business days.
"""


class RecordingLogger:
    def __init__(self) -> None:
        self.records: List[tuple] = []

    def _record(self, level: str, msg: str, data: Any) -> None:
        self.records.append((level, msg, data))

    def info(self, msg, data=None):
        self._record("info", msg, data)

    def success(self, msg, data=None):
        self._record("success", msg, data)

    def warn(self, msg, data=None):
        self._record("warn", msg, data)

    def error(self, msg, err=None):
        self._record("error", msg, err)

    def debug(self, msg, data=None):
        self._record("debug", msg, data)

    def messages(self, level: str | None = None) -> List[str]:
        return [m for lvl, m, _ in self.records if level is None or lvl == level]


class KeywordEmbeddings(Embeddings):
    """Deterministic topic-count embeddings; texts sharing keywords score close to 1."""

    dimensions = max(TOPICS.values()) + 2

    def __init__(self) -> None:
        self.document_calls: List[List[str]] = []

    def _embed(self, text: str) -> List[float]:
        vector = [0.0] * self.dimensions
        for token in TOKEN_RE.findall(text.lower()):
            axis = TOPICS.get(token)
            if axis is not None:
                vector[axis] += 1.0
        vector[-1] = BIAS
        return vector

    def embed_documents(self, texts: List[str]) -> List[List[float]]:
        self.document_calls.append(list(texts))
        return [self._embed(t) for t in texts]

    def embed_query(self, text: str) -> List[float]:
        return self._embed(text)


class ScriptedLLM:
    """
    Stand-in for the Gemini gateway.

    Rewrites questions verbatim, and answers with the first context line or
    the fallback text when the context is empty, the way the answer prompt
    instructs the real model to.
    """

    def __init__(self) -> None:
        self.prompts: List[str] = []

    def invoke(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if prompt.rstrip().endswith("Standalone question:"):
            for line in prompt.splitlines():
                if line.startswith("Question: "):
                    return line[len("Question: "):]
            return ""
        context = prompt.split("Context:\n", 1)[1].split("\n\nQuestion:", 1)[0].strip()
        if not context:
            return FALLBACK_ANSWER
        return context.splitlines()[0]


@pytest.fixture
def logger() -> RecordingLogger:
    return RecordingLogger()


@pytest.fixture
def knowledge_base(tmp_path: Path) -> Path:
    path = tmp_path / "knowledge-base.txt"
    path.write_text(KNOWLEDGE_BASE, encoding="utf-8")
    return path


@pytest.fixture
def cfg(knowledge_base: Path) -> AppConfig:
    return AppConfig(
        google_api_key="test-key",
        qdrant_collection="test_kb",
        data_path=knowledge_base,
        chunk_size=120,
        chunk_overlap=20,
        batch_size=2,
        batch_delay=0.0,
    )


@pytest.fixture
def embeddings() -> KeywordEmbeddings:
    return KeywordEmbeddings()


@pytest.fixture
def qdrant() -> QdrantClient:
    client = QdrantClient(":memory:")
    yield client
    client.close()


@pytest.fixture
def store(qdrant, embeddings, cfg, logger) -> VectorStore:
    return VectorStore(qdrant, embeddings, cfg.qdrant_collection, logger)


@pytest.fixture
def llm() -> ScriptedLLM:
    return ScriptedLLM()

"""
Polysight RAG Assistant.

Answers questions about Polysight from a Qdrant-backed knowledge base using
Google Gemini for embeddings and answer generation.
"""

__all__ = [
    "app",
    "chain",
    "cli",
    "config",
    "ingest",
    "llm",
    "logger",
    "retriever",
    "setup_data",
    "vectorstore",
]

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple

from langchain_text_splitters import RecursiveCharacterTextSplitter
from pypdf import PdfReader

from .config import AppConfig
from .logger import Logger

DEFAULT_SEPARATORS = ("\n\n", "\n", " ", "")


@dataclass(frozen=True)
class DocumentChunk:
    text: str
    metadata: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not self.text.strip():
            raise ValueError("DocumentChunk text must not be empty")


@dataclass(frozen=True)
class ChunkStats:
    total_chunks: int
    average_length: int
    min_length: int
    max_length: int


def load_text(path: Path) -> str:
    return path.read_text(encoding="utf-8")


def load_pdf_pages(path: Path) -> List[Tuple[int, str]]:
    reader = PdfReader(str(path))
    pages = []
    for i, page in enumerate(reader.pages):
        page_text = page.extract_text() or ""
        if page_text.strip():
            pages.append((i + 1, page_text))
    return pages


def load_sections(path: Path) -> List[Tuple[Optional[int], str]]:
    """
    Read the knowledge base as (page, text) pairs: one pair per non-blank PDF
    page, or a single pair with page None for text files.

    Raises FileNotFoundError if the file is missing.
    """
    if not path.exists():
        raise FileNotFoundError(f"Knowledge base not found: {path}")
    if path.suffix.lower() == ".pdf":
        return list(load_pdf_pages(path))
    return [(None, load_text(path))]


def load_knowledge_base(path: Path) -> str:
    return "\n\n".join(text for _, text in load_sections(path))


def chunk_text(
    text: str,
    source: str,
    page: Optional[int] = None,
    chunk_size: int = 1000,
    chunk_overlap: int = 200,
    separators: Sequence[str] = DEFAULT_SEPARATORS,
) -> List[DocumentChunk]:
    """
    Split `text` into overlapping chunks of at most `chunk_size` characters.

    Separators are tried in priority order (paragraph, line, word, character),
    so pieces are only cut mid-word when nothing coarser fits. Each chunk
    shares up to `chunk_overlap` characters with its predecessor.
    """
    if chunk_overlap >= chunk_size:
        raise ValueError(
            f"chunk_overlap ({chunk_overlap}) must be smaller than chunk_size ({chunk_size})"
        )

    cleaned = text.replace("\r\n", "\n")
    if not cleaned.strip():
        return []

    splitter = RecursiveCharacterTextSplitter(
        chunk_size=chunk_size,
        chunk_overlap=chunk_overlap,
        separators=list(separators),
        add_start_index=True,
        length_function=len,
    )
    base_metadata: Dict[str, Any] = {"source": source}
    if page is not None:
        base_metadata["page"] = page
    documents = splitter.create_documents([cleaned], metadatas=[base_metadata])

    chunks: List[DocumentChunk] = []
    for doc in documents:
        if not doc.page_content.strip():
            continue
        metadata = dict(doc.metadata)
        metadata["chunk_index"] = len(chunks)
        chunks.append(DocumentChunk(text=doc.page_content, metadata=metadata))
    return chunks


def chunk_stats(chunks: Sequence[DocumentChunk]) -> ChunkStats:
    if not chunks:
        return ChunkStats(total_chunks=0, average_length=0, min_length=0, max_length=0)
    lengths = [len(c.text) for c in chunks]
    return ChunkStats(
        total_chunks=len(chunks),
        average_length=round(sum(lengths) / len(lengths)),
        min_length=min(lengths),
        max_length=max(lengths),
    )


def _preview(text: str, width: int) -> str:
    return text[:width] + "..." if len(text) > width else text


def prepare_data(cfg: AppConfig, logger: Logger) -> List[DocumentChunk]:
    logger.info("Loading data from knowledge base")
    path = cfg.data_path
    try:
        sections = load_sections(path)
    except Exception as exc:
        logger.error("Error during data preparation", exc)
        raise

    size = sum(len(text) for _, text in sections)
    first = sections[0][1] if sections else ""
    logger.success(
        "Data loaded successfully",
        {"filePath": str(path), "fileSize": f"{size} characters", "preview": _preview(first, 100)},
    )

    logger.info(
        "Splitting text into chunks",
        {"chunkSize": cfg.chunk_size, "chunkOverlap": cfg.chunk_overlap, "separators": list(DEFAULT_SEPARATORS)},
    )
    # PDF pages are chunked separately so every chunk keeps its page number.
    chunks: List[DocumentChunk] = []
    for page, text in sections:
        for chunk in chunk_text(
            text,
            source=str(path),
            page=page,
            chunk_size=cfg.chunk_size,
            chunk_overlap=cfg.chunk_overlap,
        ):
            chunks.append(DocumentChunk(text=chunk.text, metadata={**chunk.metadata, "chunk_index": len(chunks)}))
    logger.info(f"Text split into {len(chunks)} chunks")

    for i, chunk in enumerate(chunks, start=1):
        logger.debug(f"Fragment {i}", {"length": len(chunk.text), "preview": _preview(chunk.text, 150)})

    stats = chunk_stats(chunks)
    logger.info("Chunk statistics", asdict(stats))
    return chunks


__all__ = [
    "DocumentChunk",
    "ChunkStats",
    "load_knowledge_base",
    "load_sections",
    "chunk_text",
    "chunk_stats",
    "prepare_data",
]

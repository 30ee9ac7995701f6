"""
One-time ingestion job: chunk the knowledge base, embed it and load it into Qdrant.

If the collection already holds data the user is asked before it is replaced;
declining keeps the existing points.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Callable, Optional

from rich.prompt import Prompt

from .config import AppConfig
from .errors import is_connection_error
from .ingest import prepare_data
from .logger import Logger
from .vectorstore import Absent, Empty, Populated, VectorStore, check_collection

Confirm = Callable[[str], str]


@dataclass(frozen=True)
class SetupResult:
    loaded: bool
    points_count: int


def ask_overwrite(question: str) -> str:
    return Prompt.ask(question, default="n")


def _is_yes(answer: str) -> bool:
    return answer.strip().lower() in {"y", "yes"}


def run_setup(
    cfg: AppConfig,
    logger: Logger,
    store: Optional[VectorStore] = None,
    confirm: Confirm = ask_overwrite,
    sleep: Callable[[float], None] = time.sleep,
) -> SetupResult:
    logger.info("Starting database setup...")

    logger.info("1: Checking connection to Qdrant")
    if store is None:
        store = VectorStore.connect(cfg, logger)

    logger.info("2: Checking collection contents")
    should_load = True
    match check_collection(store, logger):
        case Populated(points_count=count):
            logger.info(f"Collection already exists ({count} points)")
            if _is_yes(confirm("Overwrite data? (y/n)")):
                logger.info("Deleting existing collection...")
                store.delete_collection()
                logger.success("Collection deleted successfully")
            else:
                should_load = False
                logger.info("Skipping data loading - existing data will be used")
        case Empty() | Absent():
            logger.info("Collection is empty - loading data")

    if should_load:
        logger.info("3: Preparing data")
        chunks = prepare_data(cfg, logger)

        logger.info("4: Loading data into the vector store")
        logger.info("Start embedding documents... This may take a few minutes on the first run")
        store.add_documents_in_batches(
            chunks,
            batch_size=cfg.batch_size,
            delay=cfg.batch_delay,
            sleep=sleep,
        )
        logger.success("All documents have been embedded and loaded into the vector store")

    logger.info("5: Verifying data in the database")
    count = store.points_count()
    logger.success(
        "Data verification completed successfully",
        {"collection": cfg.qdrant_collection, "documentsCount": count, "status": "ready"},
    )
    logger.info("You can now run the application: polysight-rag")
    return SetupResult(loaded=should_load, points_count=count)


def setup_data(
    cfg: AppConfig,
    logger: Logger,
    store: Optional[VectorStore] = None,
    confirm: Confirm = ask_overwrite,
    sleep: Callable[[float], None] = time.sleep,
) -> int:
    """Run the ingestion job and translate failures into an exit status."""
    try:
        run_setup(cfg, logger, store=store, confirm=confirm, sleep=sleep)
    except Exception as exc:
        logger.error("Error during database setup:", exc)
        if is_connection_error(exc):
            logger.error(
                "Unable to connect to Qdrant. Please check if the Qdrant server "
                f"is running and accessible at {cfg.qdrant_url}."
            )
        return 1
    return 0


__all__ = ["SetupResult", "run_setup", "setup_data", "ask_overwrite"]

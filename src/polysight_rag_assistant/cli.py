from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import List, Optional

from .app import run_app
from .config import load_config
from .logger import ConsoleLogger
from .setup_data import ask_overwrite, setup_data


def _add_config_argument(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to a config YAML file (default: config.yaml if present).",
    )


def build_app_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="polysight-rag",
        description="Polysight RAG assistant - ask questions about the Polysight knowledge base.",
        epilog='example: polysight-rag -- "-x marks the spot?"',
    )
    _add_config_argument(parser)
    parser.add_argument(
        "question",
        nargs="*",
        help=(
            "Question to ask. Without a question an interactive session starts. "
            "Put -- before a question that begins with '-'."
        ),
    )
    return parser


def build_setup_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="polysight-rag-setup",
        description="Chunk, embed and load the knowledge base into Qdrant.",
    )
    _add_config_argument(parser)
    parser.add_argument(
        "--yes",
        "-y",
        action="store_true",
        help="Overwrite existing data without asking.",
    )
    return parser


def main(argv: Optional[List[str]] = None) -> None:
    args = build_app_parser().parse_args(argv)
    cfg = load_config(args.config)
    logger = ConsoleLogger(debug=cfg.debug)
    sys.exit(run_app(cfg, logger, question=" ".join(args.question)))


def setup_main(argv: Optional[List[str]] = None) -> None:
    args = build_setup_parser().parse_args(argv)
    cfg = load_config(args.config)
    logger = ConsoleLogger(debug=cfg.debug)
    confirm = (lambda _question: "y") if args.yes else ask_overwrite
    sys.exit(setup_data(cfg, logger, confirm=confirm))


if __name__ == "__main__":
    main()

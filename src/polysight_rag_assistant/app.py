from __future__ import annotations

import time
from typing import Callable, Optional

from rich.console import Console
from rich.prompt import Prompt

from .chain import RAGChain, build_rag_chain
from .config import AppConfig
from .errors import NotInitializedError, is_api_key_error, is_connection_error
from .logger import Logger

EXIT_WORDS = ("exit", "quit", "koniec")

TROUBLESHOOTING = (
    "1. Check if Qdrant is running: docker-compose ps",
    "2. Check environment variables in the .env file",
    "3. Make sure data has been loaded: polysight-rag-setup",
    "4. Check Qdrant logs: docker-compose logs qdrant",
)


def is_exit_command(text: str) -> bool:
    lowered = text.lower()
    return any(word in lowered for word in EXIT_WORDS)


def ask_question_prompt() -> str:
    return Prompt.ask("❓ Ask a question")


class RAGApplication:
    def __init__(
        self,
        cfg: AppConfig,
        logger: Logger,
        chain_factory: Callable[[AppConfig, Logger], RAGChain] = build_rag_chain,
        console: Optional[Console] = None,
    ) -> None:
        self.cfg = cfg
        self.logger = logger
        self.chain_factory = chain_factory
        self.console = console or Console()
        self.chain: Optional[RAGChain] = None

    @property
    def is_initialized(self) -> bool:
        return self.chain is not None

    def initialize(self) -> None:
        self.logger.info("RAG APPLICATION - QUESTION & ANSWER SYSTEM")
        self.logger.info("Initializing RAG system, preparing all components...")
        try:
            self.chain = self.chain_factory(self.cfg, self.logger)
        except Exception as exc:
            self.logger.error("Error during application initialization", exc)
            if is_connection_error(exc):
                self.logger.error("Database connection error")
                self.logger.info("Make sure Qdrant is running: docker-compose up -d")
            elif is_api_key_error(exc):
                self.logger.error("API key issue")
                self.logger.info("Check the .env file and ensure GOOGLE_API_KEY is set")
            raise
        self.logger.success("RAG system is ready to use! 🚀")

    def ask_question(self, question: str) -> str:
        if self.chain is None:
            raise NotInitializedError("Application has not been initialized")

        self.logger.info(f"📋 Question: {question}")
        self.logger.info("🔄 Processing question...")
        start = time.perf_counter()
        try:
            answer = self.chain.invoke(question)
        except Exception as exc:
            self.logger.error("Error while processing question", exc)
            raise
        elapsed_ms = round((time.perf_counter() - start) * 1000)

        self.logger.success(f"💡 Answer ({elapsed_ms}ms):")
        self.console.rule("[bold green]Answer[/bold green]")
        self.console.print(answer)
        return answer

    def run_single(self, question: str) -> str:
        return self.ask_question(question)

    def run_interactive(self, ask: Callable[[], str] = ask_question_prompt) -> None:
        self.logger.info("🎯 Interactive mode started")
        self.logger.info('Ask questions about Polysight. Type "exit" to quit.')

        while True:
            try:
                question = ask()
            except (EOFError, KeyboardInterrupt):
                break

            if not question.strip():
                self.logger.warn("Please enter a question")
                continue
            if is_exit_command(question):
                break

            try:
                self.ask_question(question)
            except Exception as exc:
                self.logger.error("Error during interactive mode", exc)

        self.logger.info("👋 Thank you for using the RAG application!")


def run_app(
    cfg: AppConfig,
    logger: Logger,
    question: str = "",
    chain_factory: Callable[[AppConfig, Logger], RAGChain] = build_rag_chain,
    ask: Callable[[], str] = ask_question_prompt,
    console: Optional[Console] = None,
) -> int:
    """Serve one question (if given) or the interactive loop; returns the exit status."""
    app = RAGApplication(cfg, logger, chain_factory=chain_factory, console=console)
    try:
        app.initialize()
        if question.strip():
            app.run_single(question)
        else:
            app.run_interactive(ask=ask)
    except Exception as exc:
        logger.error("Critical application error", exc)
        logger.info("🔧 Troubleshooting steps:")
        for step in TROUBLESHOOTING:
            logger.info(step)
        return 1
    return 0


__all__ = ["RAGApplication", "run_app", "is_exit_command", "EXIT_WORDS"]

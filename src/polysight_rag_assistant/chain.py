from __future__ import annotations

from dataclasses import dataclass, replace
from functools import partial
from typing import Callable, List, Optional, Protocol, Sequence

from langchain_core.prompts import PromptTemplate

from .config import AppConfig
from .ingest import DocumentChunk, prepare_data
from .llm import setup_llm
from .logger import Logger
from .retriever import Retriever
from .vectorstore import Absent, Empty, Populated, VectorStore, check_collection

FALLBACK_ANSWER = (
    "I'm sorry, I don't have any information about this topic. "
    "Please contact help@polysight.com"
)

STANDALONE_QUESTION_TEMPLATE = """
Transform the given question into a standalone, complete question that can be understood without additional context.
Retain the original language of the question.

Question: {question}
Standalone question:"""

ANSWER_TEMPLATE = """
You are a helpful assistant who answers questions about Polysight based on the provided context.
Instructions:

- Respond only using the information contained in the context.
- If the answer cannot be found in the context, say: "{fallback}"
- Use a friendly, natural tone.
- Provide specific, helpful answers.
- Use English.

Context:
{context}

Question:
{question}

Answer:"""

standalone_question_prompt = PromptTemplate.from_template(STANDALONE_QUESTION_TEMPLATE)
answer_prompt = PromptTemplate.from_template(ANSWER_TEMPLATE).partial(fallback=FALLBACK_ANSWER)


class TextModel(Protocol):
    def invoke(self, prompt: str) -> str: ...


class ChunkRetriever(Protocol):
    def invoke(self, query: str) -> List[DocumentChunk]: ...


@dataclass(frozen=True)
class QuestionContext:
    """Request-scoped state; fields are filled in pipeline order."""

    original_question: str
    standalone_question: Optional[str] = None
    retrieved_context: Optional[str] = None
    answer: Optional[str] = None


Stage = Callable[[QuestionContext], QuestionContext]


def combine_documents(chunks: Sequence[DocumentChunk]) -> str:
    return "\n\n".join(c.text for c in chunks)


def rewrite_question(ctx: QuestionContext, llm: TextModel) -> QuestionContext:
    prompt = standalone_question_prompt.format(question=ctx.original_question)
    standalone = llm.invoke(prompt).strip()
    return replace(ctx, standalone_question=standalone or ctx.original_question)


def retrieve_context(ctx: QuestionContext, retriever: ChunkRetriever, logger: Logger) -> QuestionContext:
    if ctx.standalone_question is None:
        raise ValueError("standalone question must be set before retrieval")
    logger.info("Retrieving context for question:", ctx.standalone_question)
    chunks = retriever.invoke(ctx.standalone_question)
    logger.debug(f"Found {len(chunks)} relevant chunks")
    return replace(ctx, retrieved_context=combine_documents(chunks))


def generate_answer(ctx: QuestionContext, llm: TextModel) -> QuestionContext:
    if ctx.retrieved_context is None:
        raise ValueError("context must be retrieved before answering")
    prompt = answer_prompt.format(context=ctx.retrieved_context, question=ctx.original_question)
    return replace(ctx, answer=llm.invoke(prompt).strip())


class RAGChain:
    """Rewrite the question, retrieve context for it, then answer from that context."""

    def __init__(self, llm: TextModel, retriever: ChunkRetriever, logger: Logger) -> None:
        self.llm = llm
        self.retriever = retriever
        self.logger = logger
        self.stages: List[Stage] = [
            partial(rewrite_question, llm=llm),
            partial(retrieve_context, retriever=retriever, logger=logger),
            partial(generate_answer, llm=llm),
        ]

    def run(self, question: str) -> QuestionContext:
        ctx = QuestionContext(original_question=question)
        for stage in self.stages:
            ctx = stage(ctx)
        return ctx

    def invoke(self, question: str) -> str:
        return self.run(question).answer or ""


def build_rag_chain(
    cfg: AppConfig,
    logger: Logger,
    llm: Optional[TextModel] = None,
    store: Optional[VectorStore] = None,
) -> RAGChain:
    logger.info("Building RAG chain")
    try:
        if llm is None:
            llm = setup_llm(cfg, logger)
        if store is None:
            store = VectorStore.connect(cfg, logger)

        match check_collection(store, logger):
            case Absent() | Empty():
                logger.info("No data in the collection - preparing and loading data")
                chunks = prepare_data(cfg, logger)
                store.add_documents_in_batches(chunks, batch_size=cfg.batch_size, delay=cfg.batch_delay)
                logger.success("Data loaded successfully into the vector store")
            case Populated(points_count=count):
                logger.warn(f"Data already exists in the collection ({count} points) - skipping loading")

        retriever = Retriever(store, k=cfg.retriever_k, score_threshold=cfg.score_threshold)
        logger.success(
            "Retriever created successfully!",
            {"maxResults": cfg.retriever_k, "searchType": "similarity", "scoreThreshold": cfg.score_threshold},
        )
    except Exception as exc:
        logger.error("Error during RAG chain creation", exc)
        raise

    chain = RAGChain(llm, retriever, logger)
    logger.success("RAG chain created successfully!")
    return chain


__all__ = [
    "FALLBACK_ANSWER",
    "QuestionContext",
    "RAGChain",
    "build_rag_chain",
    "combine_documents",
    "rewrite_question",
    "retrieve_context",
    "generate_answer",
]

from __future__ import annotations

from typing import Any, Optional

from langchain_core.language_models import BaseChatModel
from langchain_core.output_parsers import StrOutputParser
from langchain_google_genai import ChatGoogleGenerativeAI

from .config import AppConfig
from .logger import Logger


class GeminiLLM:
    """
    Hosted Gemini chat model with fixed generation parameters.

    `invoke` sends one prompt and returns the reply as plain text. API errors
    (authentication, rate limits, network) propagate to the caller unchanged.
    """

    def __init__(self, cfg: AppConfig, chat_model: Optional[BaseChatModel] = None) -> None:
        self.model_name = cfg.gemini_model
        self.max_output_tokens = cfg.max_output_tokens
        self.temperature = cfg.temperature
        if chat_model is None:
            chat_model = ChatGoogleGenerativeAI(
                model=cfg.gemini_model,
                google_api_key=cfg.google_api_key,
                temperature=cfg.temperature,
                max_output_tokens=cfg.max_output_tokens,
            )
        self.chat_model = chat_model
        self._parser = StrOutputParser()

    def invoke(self, prompt: str) -> str:
        message: Any = self.chat_model.invoke(prompt)
        return self._parser.invoke(message)


def setup_llm(cfg: AppConfig, logger: Logger, chat_model: Optional[BaseChatModel] = None) -> GeminiLLM:
    logger.info("Creating LLM instance")
    try:
        llm = GeminiLLM(cfg, chat_model=chat_model)
    except Exception as exc:
        logger.error("Error during LLM configuration", exc)
        raise
    logger.success(
        "LLM instance created successfully!",
        {"model": cfg.gemini_model, "maxTokens": cfg.max_output_tokens, "temperature": cfg.temperature},
    )
    return llm


__all__ = ["GeminiLLM", "setup_llm"]

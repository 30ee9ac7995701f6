from __future__ import annotations

import os
from pathlib import Path
from typing import Mapping, Optional

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, ValidationError

# Environment variable -> AppConfig field.
ENV_VARS = {
    "GOOGLE_API_KEY": "google_api_key",
    "QDRANT_URL": "qdrant_url",
    "QDRANT_COLLECTION_NAME": "qdrant_collection",
    "GEMINI_MODEL": "gemini_model",
    "MAX_OUTPUT_TOKENS": "max_output_tokens",
    "LOG_LEVEL": "log_level",
    "EMBEDDING_MODEL": "embedding_model",
    "KNOWLEDGE_BASE_PATH": "data_path",
}

REQUIRED_VARS = ["GOOGLE_API_KEY"]


class AppConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    google_api_key: str
    qdrant_url: str = Field(default="http://localhost:6333")
    qdrant_collection: str = Field(default="knowledge_base", min_length=1)
    gemini_model: str = Field(default="gemini-2.0-flash")
    embedding_model: str = Field(default="models/gemini-embedding-001")
    max_output_tokens: int = Field(default=2048, ge=1)
    temperature: float = Field(default=0.7, ge=0.0, le=2.0)
    log_level: str = Field(default="info")
    data_path: Path = Field(default=Path("data/knowledge-base.txt"))
    chunk_size: int = Field(default=1000, ge=1)
    chunk_overlap: int = Field(default=200, ge=0)
    batch_size: int = Field(default=10, ge=1)
    batch_delay: float = Field(default=1.0, ge=0.0)
    retriever_k: int = Field(default=3, ge=1)
    score_threshold: float = Field(default=0.7)

    @property
    def debug(self) -> bool:
        return self.log_level.lower() == "debug"

    @property
    def data_path_resolved(self) -> Path:
        return self.data_path.resolve()


def _read_yaml(path: Path) -> dict:
    with path.open("r", encoding="utf-8") as f:
        raw = yaml.safe_load(f) or {}
    if not isinstance(raw, dict):
        raise SystemExit(f"Invalid configuration in {path}: expected a mapping at the top level")
    return raw


def load_config(
    path: Optional[Path] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> AppConfig:
    """
    Build the application configuration.

    Values come from, in increasing priority: field defaults, the YAML file at
    `path` (or `config.yaml` in the working directory, if present), and the
    environment. A `.env` file is loaded into the process environment first
    unless an explicit `environ` mapping is given.

    Exits the process when a required variable is missing or a value is invalid.
    """
    if environ is None:
        load_dotenv()
        environ = os.environ

    if path is None:
        path = Path("config.yaml")
    raw = _read_yaml(path) if path.exists() else {}

    for var, field in ENV_VARS.items():
        value = environ.get(var)
        if value:
            raw[field] = value

    missing = [var for var in REQUIRED_VARS if not raw.get(ENV_VARS[var])]
    if missing:
        raise SystemExit(
            f"Environment variables are missing: {', '.join(missing)}. "
            "Please check the .env file and ensure all required variables are set."
        )

    try:
        cfg = AppConfig(**raw)
    except ValidationError as e:
        raise SystemExit(f"Invalid configuration:\n{e}") from e

    if cfg.chunk_overlap >= cfg.chunk_size:
        raise SystemExit(
            f"Invalid configuration: chunk_overlap ({cfg.chunk_overlap}) "
            f"must be smaller than chunk_size ({cfg.chunk_size})"
        )
    return cfg


__all__ = ["AppConfig", "load_config", "ENV_VARS"]

"""Runtime settings loaded from environment variables."""

import os
from pathlib import Path

from dotenv import load_dotenv

_base = Path(__file__).resolve().parent
load_dotenv(_base / ".env")
load_dotenv()  # also allow process env

# Model provider: "groq", "ollama" or "none"
LLM_PROVIDER: str = os.getenv("LLM_PROVIDER", "groq").strip().lower()

GROQ_API_KEY: str = os.getenv("GROQ_API_KEY", "")
GROQ_MODEL_NAME: str = os.getenv("GROQ_MODEL_NAME", "llama-3.1-8b-instant")
GROQ_FALLBACK_MODEL_NAME: str = os.getenv("GROQ_FALLBACK_MODEL_NAME", "llama-3.3-70b-versatile")

OLLAMA_BASE_URL: str = os.getenv("OLLAMA_BASE_URL", "http://localhost:11434").rstrip("/")
OLLAMA_MODEL: str = os.getenv("OLLAMA_MODEL", "mistral")

# Model call limits
MODEL_TIMEOUT_SECONDS: float = float(os.getenv("MODEL_TIMEOUT_SECONDS", "60"))
MODEL_TEXT_LIMIT: int = 12000  # characters of resume text sent to the model
MODEL_MAX_TOKENS: int = 1500

# Batch processing: max concurrent model calls per chunk, pause between chunks
BATCH_SIZE: int = 5
BATCH_PAUSE_SECONDS: float = 1.0

UPLOAD_DIR: Path = Path(os.getenv("UPLOAD_DIR", str(_base / "uploads")))

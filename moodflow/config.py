# moodflow configuration
# loads env vars for mongodb, gemini, and the mood flow / crisis thresholds

import os
from pathlib import Path
from pydantic_settings import BaseSettings
from dotenv import load_dotenv

# load .env from project root
load_dotenv(Path(__file__).parent.parent / ".env")


class Settings(BaseSettings):
    # mongodb
    MONGODB_URI: str = os.getenv("MONGODB_URI", "")
    MONGODB_DATABASE: str = os.getenv("MONGODB_DATABASE", "moodflow_db")

    # gemini (optional diary analysis, keyword heuristic is the fallback)
    GEMINI_API_KEY: str = os.getenv("GEMINI_API_KEY", "")
    GEMINI_MODEL: str = os.getenv("GEMINI_MODEL", "gemini-2.5-flash")
    LLM_ANALYSIS_ENABLED: bool = os.getenv("LLM_ANALYSIS_ENABLED", "true").lower() in ("1", "true", "yes")

    # cors
    FRONTEND_URL: str = os.getenv("FRONTEND_URL", "http://localhost:5173")

    # diary entry validation
    DIARY_MIN_LENGTH: int = 1
    DIARY_MAX_LENGTH: int = 500

    # sentiment keyword matching: substring (default) or whole word
    SENTIMENT_WHOLE_WORD_MATCH: bool = os.getenv("SENTIMENT_WHOLE_WORD_MATCH", "false").lower() in ("1", "true", "yes")

    # history windows
    CRISIS_HISTORY_LIMIT: int = 10
    MOOD_LOG_PAGE_SIZE: int = 30

    model_config = {"env_file": ".env", "extra": "ignore"}


settings = Settings()

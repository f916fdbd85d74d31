from dotenv import load_dotenv
import os

load_dotenv(".env")


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        return default


ENGINE_WINDOW_SIZE = _int_env("ENGINE_WINDOW_SIZE", 6)
ENGINE_BASELINE_LEVEL = _int_env("ENGINE_BASELINE_LEVEL", 2)
ENGINE_QUESTION_TIMER_SEC = _int_env("ENGINE_QUESTION_TIMER_SEC", 30)
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

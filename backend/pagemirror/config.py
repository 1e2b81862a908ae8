from pydantic_settings import BaseSettings
from functools import lru_cache
import os


class Settings(BaseSettings):
    host: str = "0.0.0.0"
    port: int = 3000

    # Flat directory holding one <code>.json per mirrored page
    content_dir: str = os.path.join(os.path.dirname(__file__), "..", "..", "content")

    # Rendering defaults
    page_load_timeout: int = 30000  # milliseconds
    wait_until: str = "networkidle"
    viewport_width: int = 1920
    viewport_height: int = 1080
    user_agent: str = (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
        "AppleWebKit/537.36 (KHTML, like Gecko) "
        "Chrome/120.0.0.0 Safari/537.36"
    )
    browser_args: list[str] = ["--no-sandbox", "--disable-setuid-sandbox"]

    # 0 = no limit on simultaneous browser sessions
    max_concurrent_renders: int = 0

    class Config:
        # Look for .env in the repo root (two levels up from backend/pagemirror/)
        _env_path = os.path.join(os.path.dirname(__file__), "..", "..", ".env")
        env_file = _env_path if os.path.exists(_env_path) else None
        env_file_encoding = "utf-8"
        extra = "ignore"


@lru_cache()
def get_settings():
    return Settings()

# config.py

import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv


@dataclass
class AppConfig:
    supabase_url: Optional[str]
    supabase_key: Optional[str]
    schema: str
    google_credentials_json: Optional[str]
    image_folder_id: Optional[str]
    live_refresh_seconds: int
    log_level: str
    timezone: str


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise RuntimeError(f"{name} must be an integer, got {raw!r}")


def load_config() -> AppConfig:
    """
    Read application settings from the environment (and `.env` if present).
    """
    load_dotenv()
    return AppConfig(
        supabase_url=os.getenv("SUPABASE_URL"),
        supabase_key=os.getenv("SUPABASE_KEY"),
        schema=os.getenv("SCHEMA", "public"),
        google_credentials_json=os.getenv("GOOGLE_CREDENTIALS_JSON"),
        image_folder_id=os.getenv("IMAGE_FOLDER_ID"),
        live_refresh_seconds=_int_env("LIVE_REFRESH_SECONDS", 15),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        timezone=os.getenv("TIMEZONE", "Asia/Kolkata"),
    )

from enum import Enum
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


BASE_DIR = Path(__file__).resolve().parent.parent


class Env(Enum):
    local = "local"
    dev = "dev"
    prod = "prod"


class Config(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="BREWMATE_", env_file=".env", extra="ignore")

    env: Env = Env.local
    html_dir: Path = BASE_DIR / "assets" / "html"
    assets_dir: Path = BASE_DIR / "assets"
    data_dir: Path = Path("data")
    openai_model: str = "gpt-4o-mini"
    default_volume: float = 20.0
    log_level: str = "INFO"

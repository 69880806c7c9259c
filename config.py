from enum import Enum
from pathlib import Path

from pydantic_settings import BaseSettings

from domain import catalog, favorites


class Env(Enum):
    local = "local"
    dev = "dev"
    prod = "prod"


class Config(BaseSettings):
    env: Env = Env.local
    catalog_url: str = catalog.BASE_URL
    catalog_timeout: float = catalog.TIMEOUT
    favorites_path: Path = Path("foodfinder.json")
    favorites_key: str = favorites.DEFAULT_KEY

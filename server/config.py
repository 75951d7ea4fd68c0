"""Server configuration."""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    model_config = {"env_prefix": "DMD_"}

    db_path: str = "dashboard.db"
    host: str = "0.0.0.0"
    port: int = 8080
    log_level: str = "info"
    allowed_origins: list[str] = ["http://localhost:5173", "http://127.0.0.1:5173"]
    token_ttl_seconds: int = 86400  # bearer tokens expire after a day
    password_hash_method: str = "pbkdf2:sha256"


settings = Settings()

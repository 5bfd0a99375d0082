"""TaskHub configuration: settings loaded from the environment."""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Database
    database_url: str = "sqlite:///data/taskhub.db"

    # CORS (comma-separated origins)
    cors_origins: str = "http://localhost:3000"

    # Credentials
    token_ttl_minutes: int = 1440  # 0 = tokens never expire
    bcrypt_rounds: int = 12

    # Overdue sweep scheduling
    overdue_sweep_enabled: bool = True
    overdue_sweep_interval_minutes: float = 1.0

    # Activity log listing
    logs_per_page: int = 15

    # Seed demo principals and tasks on startup (only into an empty user table)
    seed_demo_data: bool = False

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


settings = Settings()

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    app_name: str = "git-comments"

    # "firestore" in production, "memory" for local runs
    kv_backend: str = "firestore"
    kv_collection: str = "kv"

    allowed_hosts: list[str] = ["*"]
    allowed_origins: list[str] = ["*"]

    max_message_kb: int = 10
    default_author: str = "Guest"

    # Terminal client
    api_url: str = "http://localhost:8000"
    state_file: str = "~/.git-comments.json"

    model_config = SettingsConfigDict(
        env_prefix="GIT_COMMENTS_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    @property
    def max_message_bytes(self) -> int:
        return self.max_message_kb * 1024


settings = Settings()

from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    # GitHub OAuth application
    github_client_id: str = Field(default="")
    github_client_secret: str = Field(default="")
    github_oauth_base_url: str = Field(default="https://github.com/login/oauth")
    oauth_callback_url: str = Field(default="http://localhost:5000/auth/github/callback")
    oauth_scope: str = Field(default="repo")

    # GitHub REST API
    github_api_base_url: str = Field(default="https://api.github.com")
    request_timeout_seconds: int = Field(default=30)
    pull_request_page_size: int = Field(default=100)

    # Server
    frontend_url: str = Field(default="http://localhost:3000")
    allowed_origins: str = Field(default="http://localhost:3000")
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=5000)
    debug: bool = Field(default=False)
    log_level: str = Field(default="INFO")

    @property
    def allowed_origins_list(self) -> List[str]:
        return [origin.strip() for origin in self.allowed_origins.split(",")]

    def validate(self) -> None:
        errors = []
        if not self.github_client_id:
            errors.append("GITHUB_CLIENT_ID is required")
        if not self.github_client_secret:
            errors.append("GITHUB_CLIENT_SECRET is required")
        if errors:
            raise ValueError(f"Configuration errors: {', '.join(errors)}")


settings = Settings()

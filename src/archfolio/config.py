from __future__ import annotations

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Loads keys from process env, and also from a local .env file for convenience.
    model_config = SettingsConfigDict(
        env_prefix="ARCHFOLIO_",
        extra="ignore",
        env_file=".env",
        env_file_encoding="utf-8",
    )

    data_dir: str = "data"
    # When unset, durable URLs are file:// URIs into data_dir.
    public_base_url: str | None = None
    upload_key_prefix: str = "portfolio"

    # Keys
    gemini_api_key: str | None = None
    openai_api_key: str | None = None

    # Models
    layout_provider: str = "gemini"
    gemini_text_model: str = "gemini-2.0-flash"
    gemini_image_model: str = "gemini-2.0-flash-preview-image-generation"
    openai_text_model: str = "gpt-4.1-mini"

    # Column range requested from the model; the validator's hard range is wider.
    grid_cols_min: int = 2
    grid_cols_max: int = 6

    preview_max_px: int = 512
    log_level: str = "INFO"


settings = Settings()

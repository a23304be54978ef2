"""Application configuration loaded from environment variables."""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    tmdb_api_key: str | None = Field(default=None, alias="TMDB_API_KEY")
    tmdb_base_url: str = Field(default="https://api.themoviedb.org/3")
    tmdb_language: str | None = Field(default=None)
    tmdb_image_base: str = Field(default="https://image.tmdb.org/t/p/w500")
    tmdb_backdrop_base: str = Field(default="https://image.tmdb.org/t/p/w1280")
    tmdb_timeout: float = Field(default=10.0)
    poster_placeholder_url: str = Field(
        default="https://placehold.co/300x450/1F2937/F3F4F6?text=No+Image"
    )
    backdrop_placeholder_url: str = Field(
        default="https://placehold.co/1280x720/1F2937/F3F4F6?text=No+Backdrop"
    )
    favorites_key: str = Field(default="favorites", alias="FAVORITES_KEY")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        populate_by_name=True,
        extra="ignore",
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached settings instance."""

    return Settings()

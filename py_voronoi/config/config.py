from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Engine settings pulled from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="PY_VORONOI_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Logging Configuration
    log_level: str = Field(default="INFO", description="Logging level")
    log_format: str = Field(default="plain", description="Logging format (plain or json)")

    # Sampling Configuration
    default_site_count: int = Field(default=20, ge=0, description="Sites generated when no count is given")
    domain_min: float = Field(default=-1.0, description="Lower corner of the square sampling domain")
    domain_max: float = Field(default=1.0, description="Upper corner of the square sampling domain")

    # Triangulation Configuration
    duplicate_tolerance: float = Field(
        default=1e-9, ge=0.0, description="Sites closer than this are merged"
    )
    strict_duplicates: bool = Field(
        default=False, description="Raise instead of merging near-coincident sites"
    )

    # Voronoi Configuration
    clip_margin: float = Field(
        default=0.1, ge=0.0, description="Clip box padding as a fraction of the site extent"
    )


# Instantiate singleton settings object
settings = Settings()

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="BUILDINFO_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # General configuration
    # ----------------------------------------
    log_level: str = "INFO"

    # HTTP exposure
    # ----------------------------------------
    endpoint_path: str = "/buildinfo"

    # Installed distribution whose metadata is exposed when no record is given.
    distribution: str | None = None

    # Version control
    # --------------------------------------------------------
    git_binary: str = "git"

    # Seconds before a git invocation is aborted. None waits indefinitely.
    git_timeout: float | None = None

    # Tag reported when the repository does not contain any tags.
    default_tag: str = "0.0.0"


settings = Settings()

"""Application settings loaded from environment variables."""

from pathlib import Path

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application configuration from environment variables."""

    default_tax_year: str = "2025-26"
    tax_years_dir: str = ""
    log_level: str = "INFO"

    @property
    def tax_years_path(self) -> Path:
        """Directory holding one YAML policy file per tax year."""
        if self.tax_years_dir:
            return Path(self.tax_years_dir)
        return Path(__file__).parent / "tax_years"

    model_config = {"env_file": ".env", "extra": "ignore"}


settings = Settings()

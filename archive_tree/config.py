"""
Archive Tree — Configuration via environment variables.
"""

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings

from archive_tree.dialects import parse_utc_offset


class Settings(BaseSettings):
    """All settings read from env / .env file."""

    # Database
    database_url: str = Field(
        default="sqlite+aiosqlite:///./archive_tree.db",
        description="Async SQLAlchemy DB URL",
    )
    db_echo: bool = Field(default=False, description="Echo SQL emitted by the engine")

    # Archive
    archive_backend: str | None = Field(
        default=None,
        description="Dialect used for date-part extraction (defaults to DATABASE_URL's backend)",
    )
    archive_utc_offset: str = Field(
        default="+00:00",
        description="UTC offset years/months are computed in, e.g. '+05:30' or '-3'",
    )

    @field_validator("archive_utc_offset")
    @classmethod
    def _check_offset(cls, value: str) -> str:
        parse_utc_offset(value)
        return value

    @property
    def archive_effective_backend(self) -> str:
        """Resolve the dialect name — explicit override wins over the URL."""
        if self.archive_backend:
            return self.archive_backend.lower()
        from sqlalchemy.engine import make_url

        return make_url(self.database_url).get_backend_name()

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}


settings = Settings()

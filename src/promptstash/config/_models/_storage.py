"""Storage configuration model."""

from typing import ClassVar

from pydantic import BaseModel, ConfigDict, Field


class StorageConfiguration(BaseModel):
    """Version store configuration.

    Attributes:
        database: Path to the SQLite version ledger.
        timeout: Seconds a store operation may wait on the backing database
            before failing with StorageUnavailableError.
    """

    model_config: ClassVar[ConfigDict] = ConfigDict(frozen=True, extra="ignore")

    database: str = Field(
        default=".promptstash/versions.db",
        description="Path to the SQLite version ledger.",
    )
    timeout: float = Field(
        default=5.0,
        gt=0,
        description="Seconds to wait on the backing store before giving up.",
    )

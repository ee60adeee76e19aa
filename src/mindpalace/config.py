"""Configuration loaded from environment variables."""

import os
from dataclasses import dataclass
from pathlib import Path

from .archive import JSONFileStore, KeyValueStore, SQLiteStore
from .illustration import DEFAULT_IMAGE_MODEL
from .reasoning import DEFAULT_MODEL

STORE_BACKENDS = ("json", "sqlite")


@dataclass
class PalaceConfig:
    """Configuration for the generation workflow.

    Attributes:
        api_key: Gemini API key.
        model: Model used to structure the material.
        image_model: Model used for point illustrations.
        data_dir: Directory for the archive and logs (~/.mindpalace).
        store_backend: Archive backend, "json" or "sqlite".
        timeout_ms: HTTP timeout for service calls.
    """

    api_key: str | None = None
    model: str = DEFAULT_MODEL
    image_model: str = DEFAULT_IMAGE_MODEL
    data_dir: Path | None = None
    store_backend: str = "json"
    timeout_ms: int = 120_000

    def __post_init__(self) -> None:
        """Validate config and set defaults."""
        if self.data_dir is None:
            self.data_dir = Path.home() / ".mindpalace"

        if self.store_backend not in STORE_BACKENDS:
            raise ValueError(
                f"store_backend must be one of {', '.join(STORE_BACKENDS)}, "
                f"got {self.store_backend!r}"
            )

        if self.timeout_ms < 1:
            raise ValueError("timeout_ms must be at least 1")

    @property
    def log_dir(self) -> Path:
        """Directory for the JSONL event log."""
        assert self.data_dir is not None
        return self.data_dir / "logs"


def config_from_env() -> PalaceConfig:
    """Load configuration from environment variables."""
    data_dir = os.getenv("MINDPALACE_HOME")
    return PalaceConfig(
        api_key=os.getenv("GEMINI_API_KEY") or os.getenv("GOOGLE_API_KEY"),
        model=os.getenv("MINDPALACE_MODEL", DEFAULT_MODEL),
        image_model=os.getenv("MINDPALACE_IMAGE_MODEL", DEFAULT_IMAGE_MODEL),
        data_dir=Path(data_dir).expanduser() if data_dir else None,
        store_backend=os.getenv("MINDPALACE_STORE", "json").lower(),
        timeout_ms=int(os.getenv("MINDPALACE_TIMEOUT_MS", "120000")),
    )


def build_store(config: PalaceConfig) -> KeyValueStore:
    """Create the archive backend selected by the config."""
    assert config.data_dir is not None
    if config.store_backend == "sqlite":
        store = SQLiteStore(config.data_dir / "archive.db")
        store.init_db()
        return store
    return JSONFileStore(config.data_dir)

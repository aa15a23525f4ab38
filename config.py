"""Configuration management for Finanzas.

Settings live in ~/.config/finanzas.toml, written with defaults on first run:

    base_dir = "~/data/finanzas"
    enable_reset = false

    [database]
    data_dir = "~/data/finanzas/db"
    filename = "finanzas.db"

    [logging]
    level = "INFO"
    log_dir = "~/data/finanzas/logs"

    [categories]
    owner_id = "local"
    seed_file = "/path/to/categories.json"   # optional
"""

from pathlib import Path
from dataclasses import dataclass
from typing import Optional
import tomllib
import tomli_w


DEFAULT_OWNER_ID = "local"
CODE_DIR = Path(__file__).parent


@dataclass
class Config:
    """Application configuration.

    owner_id is the owner the CLI acts as. Categories created through the CLI
    belong to it unless --owner is given.
    """

    base_dir: Path
    db_data_dir: Path
    db_filename: str
    log_level: str
    log_dir: Path
    owner_id: str = DEFAULT_OWNER_ID
    seed_file: Optional[Path] = None
    enable_reset: bool = False

    @property
    def db_path(self) -> Path:
        """Get the full database path (data_dir/filename)."""
        return self.db_data_dir / self.db_filename

    @classmethod
    def default(cls) -> "Config":
        return cls.from_dict({})

    @classmethod
    def from_dict(cls, data: dict) -> "Config":
        """Build a Config from parsed TOML, filling in missing values."""
        base_dir = Path(data.get("base_dir", Path.home() / "data" / "finanzas"))
        database = data.get("database", {})
        logging_section = data.get("logging", {})
        categories = data.get("categories", {})

        seed_file = categories.get("seed_file")
        return cls(
            base_dir=base_dir,
            db_data_dir=Path(database.get("data_dir", base_dir / "db")),
            db_filename=database.get("filename", "finanzas.db"),
            log_level=logging_section.get("level", "INFO").upper(),
            log_dir=Path(logging_section.get("log_dir", base_dir / "logs")),
            owner_id=categories.get("owner_id", DEFAULT_OWNER_ID),
            seed_file=Path(seed_file) if seed_file else None,
            enable_reset=bool(data.get("enable_reset", False)),
        )

    def to_dict(self) -> dict:
        categories = {"owner_id": self.owner_id}
        if self.seed_file is not None:
            categories["seed_file"] = str(self.seed_file)
        return {
            "base_dir": str(self.base_dir),
            "enable_reset": self.enable_reset,
            "database": {
                "data_dir": str(self.db_data_dir),
                "filename": self.db_filename,
            },
            "logging": {
                "level": self.log_level,
                "log_dir": str(self.log_dir),
            },
            "categories": categories,
        }


def get_config_path() -> Path:
    return Path.home() / ".config" / "finanzas.toml"


def get_migrations_dir() -> Path:
    """Get the path to the migrations directory.

    This is always relative to the code location, not configurable.
    """
    return CODE_DIR / "db" / "migrations"


def get_seed_file(config: Optional[Config] = None) -> Path:
    """Get the global category seed file, honoring a configured override."""
    if config is not None and config.seed_file is not None:
        return config.seed_file
    return CODE_DIR / "db" / "seed" / "categories.json"


def load_config(config_path: Optional[Path] = None) -> Config:
    """Load configuration from file, creating default if it doesn't exist.

    Args:
        config_path: Optional explicit path. Defaults to ~/.config/finanzas.toml.

    Returns:
        Config object with loaded or default values.
    """
    config_path = config_path or get_config_path()

    if not config_path.exists():
        config = Config.default()
        _write_config(config, config_path)
        return config

    with open(config_path, "rb") as f:
        return Config.from_dict(tomllib.load(f))


def _write_config(config: Config, config_path: Path) -> None:
    config_path.parent.mkdir(parents=True, exist_ok=True)
    with open(config_path, "wb") as f:
        tomli_w.dump(config.to_dict(), f)

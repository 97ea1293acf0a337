"""Alembic migrations for the storefront schema."""

from __future__ import annotations

import tomllib
from pathlib import Path
from typing import TYPE_CHECKING, Final

from alembic import command
from alembic.config import Config

from storefront.config.storage import get_database_uri

PROJECT_ROOT: Final[Path] = Path(__file__).resolve().parents[5]
PYPROJECT_PATH: Final[Path] = PROJECT_ROOT / "pyproject.toml"
MIGRATIONS_PATH: Final[Path] = Path(__file__).resolve().parent

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine


def _alembic_options() -> dict[str, str]:
    """``[tool.alembic]`` from pyproject.toml; empty when installed without it."""

    try:
        with PYPROJECT_PATH.open("rb") as pyproject_file:
            document = tomllib.load(pyproject_file)
    except FileNotFoundError:
        return {}
    section = document.get("tool", {}).get("alembic", {})
    return {str(key): str(value) for key, value in section.items()}


def _resolve(path: str) -> Path:
    candidate = Path(path)
    return candidate if candidate.is_absolute() else (PROJECT_ROOT / candidate).resolve()


def build_config() -> Config:
    """Alembic config pointing at this package's migration scripts."""

    options = _alembic_options()
    config = Config(toml_file=str(PYPROJECT_PATH)) if options else Config()

    # the packaged scripts win when the configured location is missing (site-packages installs)
    script_location = _resolve(options["script_location"]) if "script_location" in options else None
    if script_location is None or not script_location.exists():
        script_location = MIGRATIONS_PATH
    config.set_main_option("script_location", str(script_location))
    for key, value in options.items():
        if key not in {"script_location", "prepend_sys_path"}:
            config.set_main_option(key, value)
    return config


def upgrade_head(*, engine: Engine | None = None, database_uri: str | None = None) -> None:
    """Upgrade the database schema to the latest revision."""

    config = build_config()
    if engine is not None:
        with engine.begin() as connection:
            config.attributes["connection"] = connection
            command.upgrade(config, "head")
        return
    config.set_main_option("sqlalchemy.url", database_uri or get_database_uri())
    command.upgrade(config, "head")

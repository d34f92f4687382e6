"""Schema migrations for the catalog database."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Final

from alembic import command
from alembic.config import Config

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine

SCRIPT_LOCATION: Final[Path] = Path(__file__).resolve().parent


def upgrade_head(*, engine: Engine | None = None, database_uri: str | None = None) -> None:
    """Apply every pending revision.

    With ``engine`` the upgrade runs inside one of its connections, which keeps
    in-memory SQLite databases intact. Otherwise ``database_uri`` (or ``DATABASE_URI``
    through ``env.py``) is used.
    """

    config = Config()
    config.set_main_option("script_location", str(SCRIPT_LOCATION))
    if engine is None:
        if database_uri is not None:
            config.set_main_option("sqlalchemy.url", database_uri)
        command.upgrade(config, "head")
        return
    with engine.begin() as connection:
        config.attributes["connection"] = connection
        command.upgrade(config, "head")

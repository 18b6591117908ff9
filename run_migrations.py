"""Upgrade the configured database to the latest Alembic revision."""

import sys
from pathlib import Path

from alembic import command
from alembic.config import Config

ROOT = Path(__file__).resolve().parent


def main(revision: str = "head") -> None:
    alembic_cfg = Config(str(ROOT / "alembic.ini"))
    alembic_cfg.set_main_option("script_location", str(ROOT / "alembic"))
    command.upgrade(alembic_cfg, revision)


if __name__ == "__main__":
    main(*sys.argv[1:2])

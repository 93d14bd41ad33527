from pathlib import Path

from alembic.config import Config

from alembic import command

_REPO_ROOT = Path(__file__).resolve().parents[3]


def alembic_config(db_url: str) -> Config:
    alembic_cfg = Config(str(_REPO_ROOT / "alembic.ini"))
    alembic_cfg.set_main_option("script_location", str(_REPO_ROOT / "alembic"))
    alembic_cfg.set_main_option("sqlalchemy.url", db_url)
    # keep the caller's logging setup
    alembic_cfg.attributes["configure_logger"] = False
    return alembic_cfg


def run_migrations(db_url: str, revision: str = "head") -> None:
    command.upgrade(alembic_config(db_url), revision)


def downgrade_migrations(db_url: str, revision: str = "base") -> None:
    command.downgrade(alembic_config(db_url), revision)

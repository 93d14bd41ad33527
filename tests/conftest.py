"""Shared fixtures and helpers for tests."""

import logging
import warnings
from pathlib import Path

import pytest
from testcontainers.core.container import DockerContainer
from testcontainers.core.waiting_utils import wait_for_logs

from alembic import command
from alembic.config import Config
from folder_explorer.cache import MemoryCache
from folder_explorer.core.cached import CachedHierarchyRepository
from folder_explorer.core.repository import HierarchyRepository
from folder_explorer.db import InMemoryEntityStore
from folder_explorer.db.migrations import alembic_config

logger = logging.getLogger(__name__)

_REPO_ROOT = Path(__file__).parent.parent


# ---------------------------------------------------------------------------
# Auto-marker: tag tests as "unit" or "integration" based on directory
# ---------------------------------------------------------------------------


def pytest_collection_modifyitems(items: list[pytest.Item]) -> None:
    for item in items:
        test_path = Path(str(item.fspath))
        rel = test_path.relative_to(_REPO_ROOT / "tests")
        parts = rel.parts
        if parts and parts[0] == "integration":
            item.add_marker(pytest.mark.integration)
        else:
            item.add_marker(pytest.mark.unit)


# ---------------------------------------------------------------------------
# PostgresTestBase: helpers for integration tests that need a database
# ---------------------------------------------------------------------------


class PostgresTestBase:
    IMAGE = "postgres:16-alpine"

    @staticmethod
    def create_container() -> DockerContainer:
        return (
            DockerContainer(PostgresTestBase.IMAGE)
            .with_exposed_ports(5432)
            .with_env("POSTGRES_PASSWORD", "postgres")
        )

    @staticmethod
    def get_alembic_config(connection_url: str) -> Config:
        return alembic_config(connection_url)

    @staticmethod
    def run_migrations(connection_url: str) -> None:
        command.upgrade(PostgresTestBase.get_alembic_config(connection_url), "head")

    @staticmethod
    def cleanup_migrations(connection_url: str) -> None:
        command.downgrade(PostgresTestBase.get_alembic_config(connection_url), "base")

    @staticmethod
    def wait_for_postgres(container: DockerContainer) -> None:
        with warnings.catch_warnings():
            warnings.simplefilter("ignore", DeprecationWarning)
            # the official image restarts once after initdb, so wait for the second banner
            wait_for_logs(
                container,
                r"(?s)database system is ready to accept connections.*database system is ready to accept connections",
                timeout=60,
            )


# ---------------------------------------------------------------------------
# Shared unit-test fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def store() -> InMemoryEntityStore:
    return InMemoryEntityStore()


@pytest.fixture
def repo(store: InMemoryEntityStore) -> HierarchyRepository:
    return HierarchyRepository(store, default_page_size=50, max_page_size=100, max_search_results=100)


@pytest.fixture
def memory_cache() -> MemoryCache:
    return MemoryCache(max_entries=100)


@pytest.fixture
def cached_repo(repo: HierarchyRepository, memory_cache: MemoryCache) -> CachedHierarchyRepository:
    return CachedHierarchyRepository(repo, memory_cache)

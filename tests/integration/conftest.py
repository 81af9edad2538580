from collections.abc import Iterator
from pathlib import Path

import pytest

from repostate.utils import get_logger


def pytest_collection_modifyitems(items: list[pytest.Item]) -> None:
    for item in items:
        if Path(item.path).is_relative_to(Path(__file__).parent):
            item.add_marker(pytest.mark.integration)


@pytest.fixture(autouse=True)
def reset_logger() -> Iterator[None]:
    """Drop the shared logger so no test reuses another test's stream."""
    yield
    get_logger.cache_clear()


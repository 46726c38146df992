import pytest
from fakes import ACTIVITY_KEYS_DOC, USAGE_KEYS_DOC, FakeIndexer

from netmonitor.domain.windows import ACTIVITY, USAGE, StatsKeys


@pytest.fixture
def usage_keys() -> StatsKeys:
    return StatsKeys.from_mapping(USAGE_KEYS_DOC, USAGE)


@pytest.fixture
def activity_keys() -> StatsKeys:
    return StatsKeys.from_mapping(ACTIVITY_KEYS_DOC, ACTIVITY)


@pytest.fixture
def indexer() -> FakeIndexer:
    return FakeIndexer()

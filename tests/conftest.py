import pytest

from .mocks import DATA, PATH, RangeStore


def pytest_addoption(parser):
    parser.addoption(
        "--network",
        action="store_true",
        default=False,
        help="run tests that require network access",
    )


def pytest_collection_modifyitems(config, items):
    if config.getoption("--network"):
        # --network given: do not skip network tests
        return
    skip_network = pytest.mark.skip(reason="need --network option to run")
    for item in items:
        if "network" in item.keywords:
            item.add_marker(skip_network)


@pytest.fixture
def store() -> RangeStore:
    """A store holding 100 bytes (0..99) at PATH, served in 16-byte chunks."""
    return RangeStore({PATH: DATA}, chunk_size=16)

import pytest

from container_bytes import container, fixture_sections


def pytest_addoption(parser):
    parser.addoption("--runslow", action="store_true", default=False, help="run slow scale tests")


def pytest_collection_modifyitems(config, items):
    if config.getoption("--runslow"):
        return
    skip_slow = pytest.mark.skip(reason="needs --runslow")
    for item in items:
        if "slow" in item.keywords:
            item.add_marker(skip_slow)


@pytest.fixture
def example_file(tmp_path):
    p = tmp_path / "example.r1cs"
    p.write_bytes(container(fixture_sections()))
    return p

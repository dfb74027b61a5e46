"""
Fixtures for integration tests against a real MongoDB server.

The container is started once per module. Tests are skipped when Docker
is not available.
"""

import pytest
from testcontainers.mongodb import MongoDbContainer

MONGO_IMAGE = "mongo:7.0"


@pytest.fixture(scope="module")
def mongodb_container():
    """Start a MongoDB container for the test module."""
    container = MongoDbContainer(MONGO_IMAGE)
    try:
        container.start()
    except Exception as e:
        pytest.skip(f"Docker is not available: {e}")

    yield container

    container.stop()


@pytest.fixture
def mongodb_uri(mongodb_container) -> str:
    return mongodb_container.get_connection_url()

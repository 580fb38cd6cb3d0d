# tests/integration/conftest.py - v9
"""Testcontainers fixtures for the MongoDB store and the Redis event bus.

Both containers start once per session and are addressed by their bridge
network IP plus internal port, so the suite also runs from a devcontainer
that talks to the host daemon through a mounted socket (where the mapped
localhost port is not reachable). Each Mongo test gets its own collection.
"""

from __future__ import annotations

import logging
import time
import uuid
from contextlib import contextmanager
from typing import Iterator

import pytest
import pytest_asyncio

logger = logging.getLogger(__name__)

MONGO_IMAGE = "mongo:7.0"
MONGO_PORT = 27017
REDIS_IMAGE = "redis:7-alpine"
REDIS_PORT = 6379


def pytest_configure(config):
    config.addinivalue_line("markers", "mongo: marks tests requiring a MongoDB container")
    config.addinivalue_line("markers", "redis: marks tests requiring a Redis container")


def _docker_available() -> bool:
    try:
        import docker

        docker.from_env().ping()
    except Exception:
        return False
    return True


def _bridge_ip(container, attempts: int = 10, delay: float = 0.5) -> str:
    """Poll the container's network settings until an IP shows up."""
    wrapped = container.get_wrapped_container()
    for attempt in range(1, attempts + 1):
        try:
            wrapped.reload()
        except Exception as e:
            logger.debug("reload failed (attempt %d): %s", attempt, e)
        else:
            networks = wrapped.attrs.get("NetworkSettings", {}).get("Networks", {})
            ips = [net.get("IPAddress") for net in networks.values() if net.get("IPAddress")]
            if ips:
                logger.info("Container %s reachable at %s", wrapped.short_id, ips[0])
                return ips[0]
        time.sleep(delay)
    raise RuntimeError(f"No bridge IP for container after {attempts} attempts")


@contextmanager
def _running(image: str, port: int, ready_line: str, timeout: int) -> Iterator[str]:
    """Start ``image``, wait for ``ready_line`` in its logs, yield its IP."""
    if not _docker_available():
        pytest.skip("Docker not available")

    from testcontainers.core.container import DockerContainer
    from testcontainers.core.waiting_utils import wait_for_logs

    container = DockerContainer(image).with_exposed_ports(port)
    container.start()
    try:
        wait_for_logs(container, predicate=ready_line, timeout=timeout)
        yield _bridge_ip(container)
    finally:
        container.stop()


# --- MongoDB ---

@pytest.fixture(scope="session")
def mongo_url() -> Iterator[str]:
    with _running(MONGO_IMAGE, MONGO_PORT, r"Waiting for connections", 60) as ip:
        yield f"mongodb://{ip}:{MONGO_PORT}"


@pytest_asyncio.fixture
async def mongo_store(mongo_url):
    from docwrite.storage.mongo_store import MongoDocumentStore

    store = MongoDocumentStore(
        mongo_url=mongo_url,
        database="docwrite_test",
        collection=f"test_{uuid.uuid4().hex[:8]}",
    )
    await store.ensure_indexes()
    yield store
    try:
        store._collection.drop()
    finally:
        store.close()


# --- Redis ---

@pytest.fixture(scope="session")
def redis_url() -> Iterator[str]:
    with _running(REDIS_IMAGE, REDIS_PORT, r"Ready to accept connections", 30) as ip:
        yield f"redis://{ip}:{REDIS_PORT}/0"

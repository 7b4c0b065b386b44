# tests/integration/conftest.py - v1
"""Shared fixtures for integration tests.

Container lifecycle:
- session scope: MinIO starts once per pytest session
- function scope: fresh bucket per test for isolation

Containers are reached through their bridge network IP and internal port,
which also works from inside a devcontainer with docker-outside-of-docker
where testcontainers' localhost:mapped_port is unreachable.
"""

from __future__ import annotations

import logging
import time
import uuid

import pytest

from cee3.storage.s3_store import S3ObjectStore

logger = logging.getLogger(__name__)

MINIO_IMAGE = "minio/minio:latest"
MINIO_PORT = 9000
MINIO_USER = "cee3test"
MINIO_PASSWORD = "cee3test-secret"


def pytest_configure(config):
    config.addinivalue_line("markers", "minio: marks tests requiring MinIO container")


# =====================================================================
#  DEVCONTAINER NETWORKING HELPERS
# =====================================================================

def _get_container_bridge_ip(container, max_attempts: int = 10) -> str:
    """Get container bridge network IP with retries."""
    for attempt in range(max_attempts):
        try:
            wrapped = container.get_wrapped_container()
            wrapped.reload()
            networks = wrapped.attrs.get("NetworkSettings", {}).get("Networks", {})
            for net_name, net_info in networks.items():
                ip = net_info.get("IPAddress", "")
                if ip:
                    logger.info(
                        "Container %s IP: %s (network: %s, attempt %d)",
                        wrapped.short_id, ip, net_name, attempt + 1,
                    )
                    return ip
        except Exception as e:
            logger.debug("Error getting IP (attempt %d): %s", attempt + 1, e)
        time.sleep(0.5)

    raise RuntimeError(
        f"Could not obtain container bridge IP after {max_attempts} attempts"
    )


def _docker_available() -> bool:
    """Check if Docker daemon is reachable."""
    try:
        import docker
        client = docker.from_env()
        client.ping()
        return True
    except Exception:
        return False


# =====================================================================
#  MINIO
# =====================================================================

@pytest.fixture(scope="session")
def minio_container():
    if not _docker_available():
        pytest.skip("Docker not available")

    from testcontainers.core.container import DockerContainer
    from testcontainers.core.waiting_utils import wait_for_logs

    container = (
        DockerContainer(MINIO_IMAGE)
        .with_env("MINIO_ROOT_USER", MINIO_USER)
        .with_env("MINIO_ROOT_PASSWORD", MINIO_PASSWORD)
        .with_command("server /data")
        .with_exposed_ports(MINIO_PORT)
    )
    container.start()
    wait_for_logs(container, predicate=r"API:", timeout=60)
    time.sleep(1)

    ip = _get_container_bridge_ip(container)
    logger.info("MinIO ready at %s:%d", ip, MINIO_PORT)
    yield f"http://{ip}:{MINIO_PORT}"
    container.stop()


@pytest.fixture
def minio_store(minio_container) -> S3ObjectStore:
    return S3ObjectStore(
        region="us-east-1",
        endpoint_url=minio_container,
        access_key_id=MINIO_USER,
        secret_access_key=MINIO_PASSWORD,
        force_path_style=True,
        max_attempts=2,
    )


@pytest.fixture
def minio_bucket(minio_store: S3ObjectStore) -> str:
    """Create an empty bucket for one test."""
    name = f"cee3-{uuid.uuid4().hex[:12]}"
    minio_store._s3.create_bucket(Bucket=name)
    return name

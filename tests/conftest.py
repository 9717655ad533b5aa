import os
import shutil
import tempfile
import time

import pytest

from livefile import registry


@pytest.fixture
def tmp_dir():
    d = tempfile.mkdtemp(prefix="livefile-test-")
    yield d
    shutil.rmtree(d, ignore_errors=True)


def tmp_file(tmp_dir, name):
    return os.path.join(tmp_dir, name)


@pytest.fixture(autouse=True)
def isolated_registry():
    """Drop stores opened by a test so the exit hook does not write them."""
    before = set(registry.stores())
    yield
    for path in set(registry.stores()) - before:
        registry.unregister(path)


def wait_for(predicate, timeout=3.0, interval=0.01):
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(interval)
    return predicate()

import pytest


@pytest.fixture
def anyio_backend():
    # DraftService relies on asyncio primitives (Lock, to_thread, tasks).
    return "asyncio"

"""
Integration test fixtures for TableDB.

Each test gets a real TCP server bound to a free localhost port, backed by
a JSON file store in a temporary directory.
"""

import pytest
import pytest_asyncio

from dbaas.tabledb_server.api import TableDbServer
from dbaas.tabledb_server.execute import Executor
from dbaas.tabledb_server.storage import JsonFileTableStore
from dbaas.tabledb_server.tools import QueryClient


@pytest.fixture
def data_dir(tmp_path):
    """Temporary data directory."""
    return tmp_path / "data"


@pytest.fixture
def store(data_dir):
    """JSON file store without fsync."""
    return JsonFileTableStore(str(data_dir), fsync=False)


@pytest_asyncio.fixture
async def server(store):
    """Running TCP server on an ephemeral port."""
    tcp_server = TableDbServer(Executor(store), host="127.0.0.1", port=0)
    await tcp_server.start()
    yield tcp_server
    await tcp_server.stop()


@pytest_asyncio.fixture
async def client(server):
    """Connected query client."""
    async with QueryClient("127.0.0.1", server.bound_port, timeout=5.0) as query_client:
        yield query_client

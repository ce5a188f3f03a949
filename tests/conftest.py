import pytest_asyncio

from prime_time import PrimeTime


@pytest_asyncio.fixture
async def start_server():
    """Factory that binds PrimeTime servers on ephemeral ports."""
    servers = []

    async def _start(**kwargs):
        server = PrimeTime('127.0.0.1', 0, **kwargs)
        await server.bind()
        servers.append(server)
        return server

    yield _start
    for server in servers:
        server.server.close()


@pytest_asyncio.fixture
async def server(start_server):
    return await start_server()

import asyncio
from contextlib import suppress
from typing import NamedTuple, Optional

from loguru import logger

LINE_LIMIT = 2 ** 16


class Conn(NamedTuple):
    reader: asyncio.StreamReader
    writer: asyncio.StreamWriter


class LineTooLong(Exception):
    pass


class TcpServer:
    def __init__(self, host: str = '0.0.0.0', port: int = 40000, limit: int = LINE_LIMIT,
                 idle_timeout: Optional[float] = None):
        self.server = None
        self.host = host
        self.port = port
        self.limit = limit
        self.idle_timeout = idle_timeout

    async def wait(self, coro):
        if self.idle_timeout is None:
            return await coro
        return await asyncio.wait_for(coro, self.idle_timeout)

    async def read_line(self, conn: Conn) -> bytes:
        """Read one line, terminator included.

        At EOF the unterminated remainder is returned, so an empty result
        means the peer has nothing more to send. A line longer than
        ``self.limit`` is skipped up to its terminator and reported with
        LineTooLong.
        """
        try:
            return await self.wait(conn.reader.readuntil(b'\n'))
        except asyncio.IncompleteReadError as e:
            return e.partial
        except asyncio.LimitOverrunError as e:
            await self.skip_line(conn, e.consumed)
            raise LineTooLong(f'line exceeds {self.limit} bytes') from e

    async def skip_line(self, conn: Conn, consumed: int):
        while True:
            # already buffered, so no idle timeout needed
            await conn.reader.readexactly(consumed)
            try:
                await self.wait(conn.reader.readuntil(b'\n'))
                return
            except asyncio.IncompleteReadError:
                return
            except asyncio.LimitOverrunError as e:
                consumed = e.consumed

    async def bind(self):
        self.server = await asyncio.start_server(self.accept_connection, self.host, self.port, limit=self.limit)
        self.port = self.server.sockets[0].getsockname()[1]
        return self.server

    async def start(self):
        await self.bind()
        async with self.server:
            logger.info(f"Server Ready on {self.host}:{self.port}.")
            await self.server.serve_forever()

    async def accept_connection(self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter):
        conn = Conn(reader, writer)
        peer = writer.get_extra_info("peername")
        logger.info(f'Connection Received: {peer}')
        try:
            await self.handle_connection(conn)
        except asyncio.TimeoutError:
            logger.warning(f'Connection idle for {self.idle_timeout}s: {peer}')
        except OSError as e:
            logger.warning(f'Client Disconnected: {peer} ({e!r})')
        finally:
            writer.close()
            with suppress(OSError):
                await writer.wait_closed()
            logger.info(f'{peer} closed')

    async def handle_connection(self, conn: Conn):
        raise NotImplementedError

import argparse
import asyncio
import json
import sys
from typing import NamedTuple, Optional, Union

from loguru import logger

from primality import is_prime
from tcp import LINE_LIMIT, Conn, LineTooLong, TcpServer

HOST = "127.0.0.1"
PORT = 8080
INVALID_JSON = b"Invalid JSON\n"
INT_CHUNK_DIGITS = 4000


class DecodeError(ValueError):
    pass


class Request(NamedTuple):
    method: str
    number: Union[int, float]


class Response(NamedTuple):
    method: str
    prime: bool

    def data(self) -> bytes:
        message = {"method": self.method, "prime": self.prime}
        return json.dumps(message, separators=(',', ':'), ensure_ascii=False).encode() + b'\n'


def reject_constant(name: str):
    raise DecodeError(f"{name} is not a number")


def parse_int(literal: str) -> int:
    # int() refuses more than sys.get_int_max_str_digits() digits, so convert in chunks
    digits = literal.lstrip('-')
    value = 0
    for i in range(0, len(digits), INT_CHUNK_DIGITS):
        chunk = digits[i:i + INT_CHUNK_DIGITS]
        value = value * 10 ** len(chunk) + int(chunk)
    return -value if literal.startswith('-') else value


def decode_request(data: bytes) -> Request:
    try:
        parsed = json.loads(data.decode('utf-8'), parse_constant=reject_constant, parse_int=parse_int)
    except (ValueError, RecursionError) as e:
        raise DecodeError(str(e)) from e
    if not isinstance(parsed, dict):
        raise DecodeError("request is not an object")
    method = parsed.get('method')
    if not isinstance(method, str):
        raise DecodeError("method missing or not a string")
    try:
        method.encode('utf-8')
    except UnicodeEncodeError as e:
        raise DecodeError(f"method cannot be encoded: {e}") from e
    number = parsed.get('number')
    # bool is a subclass of int
    if isinstance(number, bool) or not isinstance(number, (int, float)):
        raise DecodeError("number missing or not a number")
    return Request(method, number)


def check_prime(number: Union[int, float]) -> bool:
    if isinstance(number, float):
        return False
    return number >= 0 and is_prime(number)


def process(data: bytes) -> Optional[bytes]:
    """Answer one request line, or return None if it cannot be decoded."""
    try:
        request = decode_request(data)
    except DecodeError as e:
        logger.debug(f"{data} -> invalid: {e}")
        return None
    resp = Response(request.method, check_prime(request.number)).data()
    logger.debug(f"{data} -> {resp}")
    return resp


class PrimeTime(TcpServer):
    async def write_message(self, conn: Conn, message: bytes):
        conn.writer.write(message)
        await conn.writer.drain()

    async def handle_connection(self, conn: Conn):
        while True:
            try:
                data = await self.read_line(conn)
            except LineTooLong as e:
                logger.warning(str(e))
                await self.write_message(conn, INVALID_JSON)
                continue
            if not data:
                return
            resp = process(data)
            await self.write_message(conn, INVALID_JSON if resp is None else resp)


async def serve(host: str = HOST, port: int = PORT, limit: int = LINE_LIMIT, idle_timeout: Optional[float] = None):
    server = PrimeTime(host, port, limit=limit, idle_timeout=idle_timeout)
    await server.start()


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="prime-time", description="Line delimited JSON primality server.")
    parser.add_argument("ip", nargs="?", default=HOST, help="IP address to bind to")
    parser.add_argument("port", nargs="?", type=int, default=PORT, help="Port to bind to")
    parser.add_argument("--line-limit", type=int, default=LINE_LIMIT, help="longest accepted request line in bytes")
    parser.add_argument("--idle-timeout", type=float, default=None,
                        help="close connections idle for this many seconds")
    parser.add_argument("--log-level", default="INFO")
    return parser.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)
    logger.remove()
    logger.add(sys.stderr, level=args.log_level.upper())
    try:
        with logger.catch(onerror=lambda _: sys.exit(1)):
            asyncio.run(serve(args.ip, args.port, limit=args.line_limit, idle_timeout=args.idle_timeout))
    except KeyboardInterrupt:
        logger.info('Quitting')


if __name__ == "__main__":
    main()

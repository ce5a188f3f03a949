import json
import socket
import sys
from typing import Union

from boltons.socketutils import BufferedSocket
from loguru import logger

from prime_time import INVALID_JSON


class PrimeTimeClient:
    def __init__(self, host: str = '127.0.0.1', port: int = 8080, timeout: float = 5.0):
        sock = socket.create_connection((host, port), timeout=timeout)
        self.sock = BufferedSocket(sock, timeout=timeout)

    def send(self, msg: bytes) -> bytes:
        self.sock.sendall(msg)
        logger.debug(f"<-- {msg}")
        reply = self.sock.recv_until(b'\n', with_delimiter=True)
        logger.debug(f"--> {reply}")
        return reply

    def is_prime(self, number: Union[int, float], method: str = 'isPrime') -> bool:
        reply = self.send(json.dumps({"method": method, "number": number}).encode() + b'\n')
        if reply == INVALID_JSON:
            raise ValueError(f"server rejected {number!r}")
        return json.loads(reply)['prime']

    def close(self):
        self.sock.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()


if __name__ == "__main__":
    host, port, *numbers = sys.argv[1:]
    with PrimeTimeClient(host, int(port)) as client:
        for number in numbers:
            logger.info(f"{number}: {client.is_prime(json.loads(number))}")

# -------------------------------------------------------------------------------
# MIT License
#
# Copyright (c) 2023 - 2026 Advanced Micro Devices, Inc. All Rights Reserved.
#
# Permission is hereby granted, free of charge, to any person obtaining a copy
# of this software and associated documentation files (the "Software"), to deal
# in the Software without restriction, including without limitation the rights
# to use, copy, modify, merge, publish, distribute, sublicense, and/or sell
# copies of the Software, and to permit persons to whom the Software is
# furnished to do so, subject to the following conditions:
#
# The above copyright notice and this permission notice shall be included in all
# copies or substantial portions of the Software.
#
# THE SOFTWARE IS PROVIDED "AS IS", WITHOUT WARRANTY OF ANY KIND, EXPRESS OR
# IMPLIED, INCLUDING BUT NOT LIMITED TO THE WARRANTIES OF MERCHANTABILITY,
# FITNESS FOR A PARTICULAR PURPOSE AND NONINFRINGEMENT. IN NO EVENT SHALL THE
# AUTHORS OR COPYRIGHT HOLDERS BE LIABLE FOR ANY CLAIM, DAMAGES OR OTHER
# LIABILITY, WHETHER IN AN ACTION OF CONTRACT, TORT OR OTHERWISE, ARISING FROM,
# OUT OF OR IN CONNECTION WITH THE SOFTWARE OR THE USE OR OTHER DEALINGS IN THE
# SOFTWARE.
# -------------------------------------------------------------------------------

"""spectatord line protocol over UDP

Serializes measurements as counter records and delivers them to a local
spectatord daemon. Records look like:

C:eth.queue.unmaskInterrupt,dir=tx,queue=0:5

Delivery is fire-and-forget. Records are grouped into chunks so a single
datagram stays small, and a failed write closes and reopens the socket before
the next attempt.
"""

import logging
import socket
from typing import Iterable, List, Sequence

from ethmetrics.measurement import Measurement

DEFAULT_ADDRESS = "127.0.0.1:1234"
CHUNK_SIZE = 32
MAX_ATTEMPTS = 3


class SendError(Exception):
    """A chunk could not be written after exhausting all attempts."""


def encode(measurement: Measurement) -> bytes:
    """Render one measurement as a newline terminated counter record."""
    record = ["C:", measurement.name]
    for key in sorted(measurement.tags):
        record.append(f",{key}={measurement.tags[key]}")
    record.append(f":{measurement.value}\n")
    return "".join(record).encode("utf-8")


def encodeAll(measurements: Iterable[Measurement]) -> List[bytes]:
    return [encode(m) for m in measurements]


def parseAddress(address: str):
    """Split host:port (or [v6addr]:port) into a (host, port) tuple."""
    host, sep, port = address.rpartition(":")
    if not sep or not host or not port.isdigit():
        raise ValueError(f"Invalid spectatord address '{address}', expected host:port")
    if host.startswith("[") and host.endswith("]"):
        host = host[1:-1]
    return host, int(port)


class SpectatordSender:
    def __init__(self, address: str = DEFAULT_ADDRESS, chunk_size: int = CHUNK_SIZE, max_attempts: int = MAX_ATTEMPTS):
        """Open a UDP socket towards spectatord.

        Args:
            address (str): Destination as host:port.
            chunk_size (int): Maximum number of records per datagram.
            max_attempts (int): Write attempts per chunk before giving up.

        Raises:
            ConnectionError: The socket could not be created or connected.
        """
        if chunk_size < 1 or max_attempts < 1:
            raise ValueError("chunk_size and max_attempts must be positive")

        self.__address = address
        self.__chunk_size = chunk_size
        self.__max_attempts = max_attempts
        self.__sock = None

        try:
            self.__destination = parseAddress(address)
        except ValueError as e:
            raise ConnectionError(str(e)) from e

        self.__initConnection()
        logging.debug(f"spectatord sender ready for {address}")

    @property
    def address(self) -> str:
        return self.__address

    def __connect(self) -> socket.socket:
        host, port = self.__destination
        last_error = None
        for family, kind, proto, _, sockaddr in socket.getaddrinfo(host, port, type=socket.SOCK_DGRAM):
            sock = None
            try:
                sock = socket.socket(family, kind, proto)
                sock.connect(sockaddr)
                return sock
            except OSError as e:
                last_error = e
                if sock is not None:
                    sock.close()
        raise last_error or OSError(f"no usable address for {host}:{port}")

    def __initConnection(self):
        """Close the current socket, if any, and open a new one."""
        if self.__sock is not None:
            self.__sock.close()
            self.__sock = None
        try:
            self.__sock = self.__connect()
        except OSError as e:
            raise ConnectionError(f"Unable to connect to spectatord at {self.__address}: {e}") from e

    def sendChunk(self, chunk: Sequence[bytes]):
        """Write one chunk of records as a single datagram.

        Every failed write is followed by exactly one reconnect. A sender left
        without a socket by an earlier failed reconnect, or by close(), opens a
        new one first. Reconnect failures propagate immediately as
        ConnectionError.

        Raises:
            ConnectionError: The socket could not be reopened.
            SendError: All write attempts failed.
        """
        payload = b"".join(chunk)
        last_error = None
        attempt = 0
        while attempt < self.__max_attempts:
            attempt += 1
            if self.__sock is None:
                self.__initConnection()
            try:
                self.__sock.send(payload)
                return
            except OSError as e:
                last_error = e
                logging.debug(f"spectatord write attempt {attempt}/{self.__max_attempts} failed: {e}")
            self.__initConnection()

        raise SendError(
            f"Unable to send {len(chunk)} records to {self.__address} after {attempt} attempts: {last_error}"
        ) from last_error

    def sendAll(self, records: Sequence[bytes]) -> int:
        """Send records in order, chunk by chunk.

        Stops at the first failing chunk; remaining chunks are not sent. The
        error raised carries the number of records already written in `sent`.

        Returns:
            int: Number of records written.
        """
        sent = 0
        for begin in range(0, len(records), self.__chunk_size):
            chunk = records[begin : begin + self.__chunk_size]
            try:
                self.sendChunk(chunk)
            except (ConnectionError, SendError) as e:
                e.sent = sent
                raise
            sent += len(chunk)
        return sent

    def close(self):
        if self.__sock is not None:
            self.__sock.close()
            self.__sock = None

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()

import logging
import re
import socket
from dataclasses import dataclass

from .errors import InvalidFormat, SendError

logger = logging.getLogger("wolserver.wol")

WOL_PORT = 9
BROADCAST_ALL = "255.255.255.255"
PACKET_SIZE = 102

# One separator, captured once and reused, so "00:11-22:33:44:55" fails.
MAC_PATTERN = re.compile(r"[0-9A-Fa-f]{2}([:-])[0-9A-Fa-f]{2}(?:\1[0-9A-Fa-f]{2}){4}")


@dataclass(frozen=True)
class MacAddress:
    octets: bytes

    def __post_init__(self) -> None:
        if len(self.octets) != 6:
            raise ValueError(f"MAC address must be 6 bytes, got {len(self.octets)}")

    def __str__(self) -> str:
        return ":".join(f"{b:02X}" for b in self.octets)


@dataclass(frozen=True)
class SendResult:
    address: str
    port: int
    bytes_sent: int
    used_fallback: bool


@dataclass(frozen=True)
class WakeResult:
    mac: str
    send: SendResult


def validate_and_parse(raw: str) -> MacAddress:
    if not isinstance(raw, str) or not MAC_PATTERN.fullmatch(raw):
        raise InvalidFormat(f"Invalid MAC address format: {raw!r} (expected e.g. 00:11:22:33:44:55)")
    clean = raw.replace(":", "").replace("-", "")
    return MacAddress(bytes.fromhex(clean))


def build_magic_packet(mac: MacAddress) -> bytes:
    return b"\xff" * 6 + mac.octets * 16


def _check_timeout(timeout: float | None) -> None:
    if timeout is not None and not timeout > 0:
        raise ValueError(f"timeout must be positive, got {timeout}")


class BroadcastSender:
    """Fire-and-forget UDP broadcast of a magic packet.

    The primary path connects a UDP socket to the broadcast address and
    writes to it. If that fails, the fallback path binds an unconnected
    socket to an ephemeral port and addresses the packet explicitly with
    ``sendto``. Nothing is awaited from the target.
    """

    def __init__(
        self,
        port: int = WOL_PORT,
        primary_address: str = BROADCAST_ALL,
        fallback_address: str = BROADCAST_ALL,
        timeout: float | None = 1.0,
        socket_factory=socket.socket,
    ) -> None:
        if not 1 <= port <= 65535:
            raise ValueError(f"port must be between 1 and 65535, got {port}")
        _check_timeout(timeout)
        self.port = port
        self.primary_address = primary_address
        self.fallback_address = fallback_address
        self.timeout = timeout
        self._socket_factory = socket_factory

    def _open(self, timeout: float | None):
        sock = self._socket_factory(socket.AF_INET, socket.SOCK_DGRAM)
        try:
            sock.setsockopt(socket.SOL_SOCKET, socket.SO_BROADCAST, 1)
            sock.settimeout(timeout)
        except BaseException:
            sock.close()
            raise
        return sock

    @staticmethod
    def _check_written(sent: int, packet: bytes) -> None:
        if sent != len(packet):
            raise OSError(f"short write: {sent} of {len(packet)} bytes sent")

    def _send_primary(self, packet: bytes, timeout: float | None) -> int:
        with self._open(timeout) as sock:
            sock.connect((self.primary_address, self.port))
            sent = sock.send(packet)
        self._check_written(sent, packet)
        return sent

    def _send_fallback(self, packet: bytes, timeout: float | None) -> int:
        with self._open(timeout) as sock:
            sock.bind(("", 0))
            sent = sock.sendto(packet, (self.fallback_address, self.port))
        self._check_written(sent, packet)
        return sent

    def send(self, packet: bytes, timeout: float | None = None) -> SendResult:
        if len(packet) != PACKET_SIZE:
            raise ValueError(f"magic packet must be {PACKET_SIZE} bytes, got {len(packet)}")
        if timeout is None:
            timeout = self.timeout
        _check_timeout(timeout)

        try:
            sent = self._send_primary(packet, timeout)
            return SendResult(self.primary_address, self.port, sent, used_fallback=False)
        except OSError as exc:
            primary_error = exc
            logger.warning(
                "primary_send_failed",
                extra={"extra": {"address": self.primary_address, "port": self.port, "error": str(exc)}},
            )

        logger.info("fallback_send", extra={"extra": {"address": self.fallback_address, "port": self.port}})
        try:
            sent = self._send_fallback(packet, timeout)
        except OSError as exc:
            raise SendError(
                f"Failed to send magic packet: primary ({primary_error}), fallback ({exc})",
                primary_error=primary_error,
            ) from exc
        return SendResult(self.fallback_address, self.port, sent, used_fallback=True)


def wake(raw_mac: str, sender: BroadcastSender | None = None, timeout: float | None = None) -> WakeResult:
    mac = validate_and_parse(raw_mac)
    packet = build_magic_packet(mac)
    if sender is None:
        sender = BroadcastSender()
    result = sender.send(packet, timeout=timeout)
    logger.info(
        "magic_packet_sent",
        extra={"extra": {"mac": str(mac), "address": result.address, "fallback": result.used_fallback}},
    )
    return WakeResult(mac=str(mac), send=result)

import os
from dataclasses import dataclass

from .wol import BROADCAST_ALL, WOL_PORT


def parse_port(name: str, default: int) -> int:
    value = int(os.getenv(name, str(default)))
    if not 1 <= value <= 65535:
        raise ValueError(f"{name} must be between 1 and 65535, got {value}")
    return value


def parse_timeout(name: str, default: float) -> float:
    value = float(os.getenv(name, str(default)))
    if not value > 0:
        raise ValueError(f"{name} must be a positive number of seconds, got {value}")
    return value


@dataclass(frozen=True)
class Settings:
    port: int
    db_path: str
    wol_port: int
    broadcast: str
    fallback_broadcast: str
    send_timeout: float
    log_level: str


def load_settings() -> Settings:
    return Settings(
        port=parse_port("APP_PORT", 8090),
        db_path=os.getenv("DB_PATH", "./devices.db"),
        wol_port=parse_port("WOL_PORT", WOL_PORT),
        broadcast=os.getenv("WOL_BROADCAST", BROADCAST_ALL).strip() or BROADCAST_ALL,
        fallback_broadcast=os.getenv("WOL_FALLBACK_BROADCAST", BROADCAST_ALL).strip() or BROADCAST_ALL,
        send_timeout=parse_timeout("WOL_TIMEOUT", 1.0),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
    )

import sqlite3
from contextlib import contextmanager
from threading import Lock

from .errors import DeviceNotFound, DuplicateMac


class Database:
    def __init__(self, path: str) -> None:
        self.path = path
        self._lock = Lock()

    @contextmanager
    def connection(self):
        conn = sqlite3.connect(self.path)
        conn.row_factory = sqlite3.Row
        try:
            yield conn
            conn.commit()
        finally:
            conn.close()

    def init(self) -> None:
        with self._lock, self.connection() as conn:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS devices (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    name TEXT NOT NULL,
                    mac TEXT NOT NULL UNIQUE
                )
                """
            )

    def list_devices(self):
        with self._lock, self.connection() as conn:
            rows = conn.execute("SELECT id, name, mac FROM devices ORDER BY id ASC").fetchall()
        return [dict(row) for row in rows]

    def get_device(self, device_id: int):
        with self._lock, self.connection() as conn:
            row = conn.execute("SELECT id, name, mac FROM devices WHERE id = ?", (device_id,)).fetchone()
        return dict(row) if row else None

    def get_mac(self, device_id: int) -> str:
        device = self.get_device(device_id)
        if device is None:
            raise DeviceNotFound(f"Device {device_id} not found")
        return device["mac"]

    def add_device(self, name: str, mac: str) -> int:
        try:
            with self._lock, self.connection() as conn:
                cursor = conn.execute("INSERT INTO devices (name, mac) VALUES (?, ?)", (name, mac))
                device_id = cursor.lastrowid
        except sqlite3.IntegrityError as exc:
            raise DuplicateMac(f"MAC address {mac} is already registered") from exc
        return device_id

    def update_device(self, device_id: int, name: str, mac: str) -> int:
        try:
            with self._lock, self.connection() as conn:
                cursor = conn.execute(
                    "UPDATE devices SET name = ?, mac = ? WHERE id = ?",
                    (name, mac, device_id),
                )
        except sqlite3.IntegrityError as exc:
            raise DuplicateMac(f"MAC address {mac} is already registered") from exc
        return cursor.rowcount

    def delete_device(self, device_id: int) -> int:
        with self._lock, self.connection() as conn:
            cursor = conn.execute("DELETE FROM devices WHERE id = ?", (device_id,))
        return cursor.rowcount

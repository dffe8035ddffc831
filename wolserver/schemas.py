from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field, field_validator


class DeviceIn(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    # Checked by wol.validate_and_parse in the handler so a bad MAC maps to 400.
    mac: str

    @field_validator("name")
    @classmethod
    def validate_name(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Device name must not be blank")
        return value


class Device(BaseModel):
    id: int
    name: str
    mac: str


class WakeRequest(BaseModel):
    mac: str


class ApiMessage(BaseModel):
    success: bool
    message: str
    data: dict[str, Any] | None = None

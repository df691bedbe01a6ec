# gencert/common/config.py
"""
Run configuration for one generation.

Values are validated once here and then passed explicitly into the
assemblers; nothing in the core reads module-level state.
"""
from datetime import timedelta
from typing import List

from pydantic import BaseModel, ConfigDict, field_validator, model_validator

from gencert.common.utils import parse_duration, split_hosts

VERSION = "0.2"

DEFAULT_VALID_FOR = timedelta(hours=365 * 24)

# output names of the authorities in a tiered run
RESERVED_NAMES = ("root", "intermediate-server", "intermediate-client")


def check_valid_for(value: timedelta) -> timedelta:
    if value <= timedelta(0):
        raise ValueError("validity duration must be positive")
    if value.microseconds:
        raise ValueError("validity duration must be a whole number of seconds")
    return value


class GenerationConfig(BaseModel):
    """Parameters of the flat root + leaf + client run."""
    model_config = ConfigDict(frozen=True)

    hosts: List[str]
    organization: str = "Acme Co"
    valid_for: timedelta = DEFAULT_VALID_FOR

    @field_validator("hosts", mode="before")
    @classmethod
    def _split_hosts(cls, v):
        if isinstance(v, str):
            return split_hosts(v)
        if not isinstance(v, (list, tuple)):
            raise ValueError("hosts must be a comma-separated string or a list of strings")
        if not all(isinstance(h, str) for h in v):
            raise ValueError("every host must be a string")
        return [h.strip() for h in v if h.strip()]

    @field_validator("organization")
    @classmethod
    def _non_empty_org(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("organization must not be empty")
        return v

    @field_validator("valid_for", mode="before")
    @classmethod
    def _parse_duration(cls, v):
        if isinstance(v, str):
            return parse_duration(v)
        return v

    @field_validator("valid_for")
    @classmethod
    def _positive_duration(cls, v: timedelta) -> timedelta:
        return check_valid_for(v)


class TieredConfig(BaseModel):
    """Parameters of the root -> intermediates -> per-name leaves run."""
    model_config = ConfigDict(frozen=True)

    organization: str = "ACME Company"
    valid_for: timedelta = DEFAULT_VALID_FOR
    server_names: List[str] = ["server1.local", "server2.local", "server3.local"]
    client_names: List[str] = ["client1", "client2", "client3"]

    @field_validator("organization")
    @classmethod
    def _non_empty_org(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("organization must not be empty")
        return v

    @field_validator("valid_for", mode="before")
    @classmethod
    def _parse_duration(cls, v):
        if isinstance(v, str):
            return parse_duration(v)
        return v

    @field_validator("valid_for")
    @classmethod
    def _positive_duration(cls, v: timedelta) -> timedelta:
        return check_valid_for(v)

    @field_validator("server_names", "client_names")
    @classmethod
    def _unique_names(cls, v: List[str]) -> List[str]:
        if len(set(v)) != len(v):
            raise ValueError("names must be unique")
        return v

    @model_validator(mode="after")
    def _usable_file_names(self):
        names = self.server_names + self.client_names
        if len(set(names)) != len(names):
            raise ValueError("server and client names must not overlap")
        for name in names:
            if name in RESERVED_NAMES:
                raise ValueError(f"{name!r} is reserved for an authority")
            if not name or name in (".", "..") or "/" in name or "\\" in name:
                raise ValueError(f"{name!r} is not usable as a file name")
        return self

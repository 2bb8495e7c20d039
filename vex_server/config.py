from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping, Optional

from common.errors import ConfigError


DEFAULT_DB = "/var/osm/db"
DEFAULT_CMD = "vex"
DEFAULT_HOST = "0.0.0.0"
DEFAULT_PORT = 8282
DEFAULT_CHUNK_SIZE = 64 * 1024


def _int_env(env: Mapping[str, str], key: str, default: int, lo: int, hi: int) -> int:
    raw = env.get(key)
    if raw is None or not raw.strip():
        return default
    try:
        v = int(raw.strip())
    except ValueError:
        raise ConfigError(f"{key} must be an integer, got {raw!r}") from None
    if not lo <= v <= hi:
        raise ConfigError(f"{key} must be between {lo} and {hi}, got {v}")
    return v


@dataclass(frozen=True, slots=True)
class Settings:
    """
    Process-wide configuration, read once at startup and passed to create_app().

    Attributes:
        db_path: database directory handed to the extraction program.
        command: extraction program; split shell-style, so extra leading
            arguments are allowed (e.g. "python3 /opt/fake_vex.py").
        host, port: bind address for uvicorn.
        chunk_size: max bytes per read from the program's stdout; also the
            StreamReader buffer limit, which bounds memory per request.
        log_level: root logger level name.
    """
    db_path: str = DEFAULT_DB
    command: str = DEFAULT_CMD
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    chunk_size: int = DEFAULT_CHUNK_SIZE
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        env = os.environ if environ is None else environ
        command = env.get("VEX_CMD") or DEFAULT_CMD
        if not command.strip():
            raise ConfigError("VEX_CMD must not be blank")
        return cls(
            db_path=env.get("VEX_DB") or DEFAULT_DB,
            command=command,
            host=env.get("VEX_HOST") or DEFAULT_HOST,
            port=_int_env(env, "VEX_PORT", DEFAULT_PORT, 1, 65535),
            chunk_size=_int_env(env, "VEX_CHUNK_SIZE", DEFAULT_CHUNK_SIZE, 1, 16 * 1024 * 1024),
            log_level=(env.get("LOG_LEVEL") or "INFO").upper(),
        )

"""
Runtime settings: defaults < VTS_MCP_* environment variables < CLI flags.
"""

from __future__ import annotations

import argparse
import os
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

from vts_mcp.core.errors import ConfigError

ENV_PREFIX = "VTS_MCP_"


@dataclass(frozen=True)
class Settings:
    host: str = "127.0.0.1"
    port: int = 8001
    token_path: Path = Path("auth_token.json")
    plugin_name: str = "VTubeStudioMCPServer"
    plugin_developer: str = "DeveloperName"
    plugin_icon_path: Optional[Path] = None
    handshake_timeout_s: float = 10.0
    request_timeout_s: float = 5.0
    connect_timeout_s: float = 5.0
    reconnect_delay_s: float = 3.0
    log_level: str = "INFO"
    log_file: Optional[Path] = None

    @property
    def url(self) -> str:
        return f"ws://{self.host}:{self.port}"


_CASTS = {
    "port": int,
    "token_path": Path,
    "plugin_icon_path": Path,
    "handshake_timeout_s": float,
    "request_timeout_s": float,
    "connect_timeout_s": float,
    "reconnect_delay_s": float,
    "log_level": str.upper,
    "log_file": Path,
}


def _coerce(name: str, raw: Any) -> Any:
    cast = _CASTS.get(name, str)
    try:
        value = cast(raw)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"Invalid value for {name}: {raw!r}") from exc
    if name == "port" and not 0 < value < 65536:
        raise ConfigError(f"Port out of range: {value}")
    if name.endswith("_s") and value <= 0:
        raise ConfigError(f"{name} must be positive, got {value}")
    return value


def from_env(env: Optional[Mapping[str, str]] = None, base: Optional[Settings] = None) -> Settings:
    env = os.environ if env is None else env
    updates: Dict[str, Any] = {}
    for f in fields(Settings):
        raw = env.get(ENV_PREFIX + f.name.upper())
        if raw is not None and raw != "":
            updates[f.name] = _coerce(f.name, raw)
    return replace(base or Settings(), **updates)


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="vts-mcp",
        description="MCP stdio server bridging VTube Studio's WebSocket API.",
    )
    ap.add_argument("--host", help="VTube Studio API host (default 127.0.0.1)")
    ap.add_argument("--port", help="VTube Studio API port (default 8001)")
    ap.add_argument("--token-path", dest="token_path", help="Where the authentication token is stored")
    ap.add_argument("--plugin-name", dest="plugin_name")
    ap.add_argument("--plugin-developer", dest="plugin_developer")
    ap.add_argument("--plugin-icon", dest="plugin_icon_path", help="128x128 PNG shown in the VTube Studio prompt")
    ap.add_argument("--handshake-timeout", dest="handshake_timeout_s", help="Seconds")
    ap.add_argument("--request-timeout", dest="request_timeout_s", help="Seconds")
    ap.add_argument("--connect-timeout", dest="connect_timeout_s", help="Seconds")
    ap.add_argument("--reconnect-delay", dest="reconnect_delay_s", help="Seconds")
    ap.add_argument("--log-level", dest="log_level", help="DEBUG, INFO, WARNING, ERROR")
    ap.add_argument("--log-file", dest="log_file")
    return ap


def load_settings(argv: Optional[List[str]] = None, env: Optional[Mapping[str, str]] = None) -> Settings:
    settings = from_env(env)
    args = build_parser().parse_args(argv)
    updates = {k: _coerce(k, v) for k, v in vars(args).items() if v is not None}
    return replace(settings, **updates)

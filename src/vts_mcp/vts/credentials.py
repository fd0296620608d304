"""
Persisted VTube Studio authentication token.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, Union

_log = logging.getLogger("vts_mcp.credentials")


def _utc_timestamp() -> str:
    now = datetime.now(timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")


@dataclass(frozen=True)
class Credential:
    token: str
    timestamp: str

    def as_dict(self) -> dict:
        return {"authenticationToken": self.token, "timestamp": self.timestamp}


class CredentialStore:
    """
    One JSON file: {"authenticationToken": ..., "timestamp": ...}.
    Deleting the file by hand forces a new token request on the next handshake.
    """

    def __init__(self, path: Union[str, Path]) -> None:
        self.path = Path(path)

    def exists(self) -> bool:
        return self.path.is_file()

    def load(self) -> Optional[Credential]:
        if not self.path.exists():
            return None
        try:
            raw = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            _log.error("Error reading stored token %s: %s", self.path, exc)
            return None
        token = raw.get("authenticationToken") if isinstance(raw, dict) else None
        if not isinstance(token, str) or not token:
            _log.error("Stored token file %s has no authenticationToken", self.path)
            return None
        return Credential(token=token, timestamp=str(raw.get("timestamp") or ""))

    def save(self, token: str) -> Credential:
        cred = Credential(token=token, timestamp=_utc_timestamp())
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp = tempfile.mkstemp(prefix=".auth_token.", suffix=".tmp", dir=str(self.path.parent))
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(cred.as_dict(), fh, indent=2)
            os.replace(tmp, self.path)
        except BaseException:
            if os.path.exists(tmp):
                os.unlink(tmp)
            raise
        _log.info("Authentication token saved to %s", self.path)
        return cred

    def delete(self) -> bool:
        try:
            self.path.unlink()
        except FileNotFoundError:
            return False
        _log.info("Deleted stored token %s", self.path)
        return True

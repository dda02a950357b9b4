import json
import logging
import os
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)

DEFAULT_APP_ID = "default-app-id"
BACKENDS = {"firebase", "memory"}


def _parse_csv_env(name: str, default: str) -> list[str]:
    raw = os.getenv(name, default)
    return [item.strip() for item in raw.split(",") if item.strip()]


def _parse_json_env(name: str) -> Dict[str, Any]:
    raw = os.getenv(name, "").strip()
    if not raw:
        return {}
    try:
        parsed = json.loads(raw)
    except json.JSONDecodeError:
        logger.warning("%s is not valid JSON; using an empty configuration", name)
        return {}
    if not isinstance(parsed, dict):
        logger.warning("%s must be a JSON object; using an empty configuration", name)
        return {}
    return parsed


def collection_path(app_id: str) -> str:
    return f"artifacts/{app_id}/public/data/services"


@dataclass
class Settings:
    app_id: str = DEFAULT_APP_ID
    firebase_config: Dict[str, Any] = field(default_factory=dict)
    initial_auth_token: Optional[str] = None
    credentials_path: Optional[str] = None
    backend: str = "firebase"
    cors_origins: list[str] = field(default_factory=lambda: ["*"])
    trusted_hosts: list[str] = field(default_factory=lambda: ["*"])
    log_level: str = "INFO"

    @property
    def collection_path(self) -> str:
        return collection_path(self.app_id)

    @classmethod
    def from_env(cls) -> "Settings":
        backend = os.getenv("MARKETPLACE_BACKEND", "firebase").strip().lower()
        if backend not in BACKENDS:
            logger.warning("Unknown MARKETPLACE_BACKEND %r; using firebase", backend)
            backend = "firebase"
        return cls(
            app_id=os.getenv("MARKETPLACE_APP_ID", "").strip() or DEFAULT_APP_ID,
            firebase_config=_parse_json_env("FIREBASE_CONFIG"),
            initial_auth_token=os.getenv("INITIAL_AUTH_TOKEN", "").strip() or None,
            credentials_path=os.getenv("FIREBASE_CREDENTIALS_PATH", "").strip() or None,
            backend=backend,
            cors_origins=_parse_csv_env("CORS_ORIGINS", "*"),
            trusted_hosts=_parse_csv_env("TRUSTED_HOSTS", "*"),
            log_level=os.getenv("LOG_LEVEL", "INFO").strip() or "INFO",
        )

from __future__ import annotations

import os
from dataclasses import asdict, dataclass, replace
from typing import Any, Callable, Dict, Mapping, Optional

from ..domain.time_utils import resolve_zone
from ..utils.logging import env_requests_debug

DEFAULT_BACKEND_URL = "http://127.0.0.1:8090"

ENV_OVERRIDES: Dict[str, str] = {
    "EPIXODO_BACKEND_URL": "backend_url",
    "EPIXODO_TIMEZONE": "timezone",
    "EPIXODO_REQUEST_TIMEOUT_S": "request_timeout_s",
    "EPIXODO_PAGE_SIZE": "page_size",
}


@dataclass
class SettingsConfig:
    """Typed runtime settings that persist via StorageLocal."""

    backend_url: str = DEFAULT_BACKEND_URL
    timezone: str = "UTC"
    request_timeout_s: int = 10
    retries: int = 0
    page_size: int = 200
    debug_logging: bool = False


def _default_debug_logging() -> bool:
    return env_requests_debug()


class SettingsVM:
    """Keeps app settings state and validation, no I/O here."""

    def __init__(
        self,
        *,
        config: Optional[SettingsConfig] = None,
        on_save: Optional[Callable[[dict], None]] = None,
    ) -> None:
        self.config = config or SettingsConfig(debug_logging=_default_debug_logging())
        self.on_save = on_save

    # ------------------------------------------------------------------
    # Properties bridging to the typed config
    # ------------------------------------------------------------------
    @property
    def backend_url(self) -> str:
        return self.config.backend_url

    @backend_url.setter
    def backend_url(self, value: str) -> None:
        self.config = replace(self.config, backend_url=self._coerce_url(value))

    @property
    def timezone(self) -> str:
        return self.config.timezone

    @timezone.setter
    def timezone(self, value: str) -> None:
        self.config = replace(self.config, timezone=self._coerce_timezone(value))

    @property
    def request_timeout_s(self) -> int:
        return self.config.request_timeout_s

    @request_timeout_s.setter
    def request_timeout_s(self, value: int) -> None:
        coerced = self._coerce_int("request_timeout_s", value, minimum=1)
        self.config = replace(self.config, request_timeout_s=coerced)

    @property
    def page_size(self) -> int:
        return self.config.page_size

    @page_size.setter
    def page_size(self, value: int) -> None:
        self.config = replace(self.config, page_size=self._coerce_int("page_size", value, minimum=1))

    @property
    def debug_logging(self) -> bool:
        return self.config.debug_logging

    # ------------------------------------------------------------------
    def is_valid(self) -> bool:
        return bool(self.backend_url) and self.request_timeout_s > 0 and self.page_size > 0

    def apply_dict(self, payload: Mapping[str, Any]) -> None:
        """Apply persisted settings to the view-model."""
        if not isinstance(payload, Mapping):
            raise ValueError("Settings payload must be a mapping of flat keys.")

        allowed = set(SettingsConfig.__annotations__.keys())
        unknown = set(payload.keys()) - allowed
        if unknown:
            raise ValueError(
                f"Unsupported settings keys: {', '.join(sorted(str(key) for key in unknown))}"
            )

        updates = {key: self._coerce_config_value(key, payload[key]) for key in payload}
        if updates:
            self.config = replace(self.config, **updates)

    def apply_env(self, environ: Optional[Mapping[str, str]] = None) -> None:
        """Apply ``EPIXODO_*`` overrides; they win over persisted values."""
        env = os.environ if environ is None else environ
        updates: Dict[str, Any] = {}
        for var, key in ENV_OVERRIDES.items():
            raw = env.get(var)
            if raw is None or not str(raw).strip():
                continue
            try:
                updates[key] = self._coerce_config_value(key, raw)
            except ValueError as exc:
                raise ValueError(f"{var}: {exc}") from exc
        if updates:
            self.config = replace(self.config, **updates)

    def to_dict(self) -> dict:
        return asdict(self.config)

    def cmd_save(self) -> None:
        if not self.is_valid():
            raise ValueError("Settings invalid")
        if self.on_save:
            self.on_save(self.to_dict())

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _coerce_config_value(self, key: str, raw: Any) -> Any:
        if key == "backend_url":
            return self._coerce_url(raw)
        if key == "timezone":
            return self._coerce_timezone(raw)
        if key == "request_timeout_s":
            return self._coerce_int(key, raw, minimum=1)
        if key == "page_size":
            return self._coerce_int(key, raw, minimum=1)
        if key == "retries":
            return self._coerce_int(key, raw, minimum=0)
        if key == "debug_logging":
            return self._coerce_bool(raw)
        raise ValueError(f"Unhandled config field: {key}")

    @staticmethod
    def _coerce_url(value: Any) -> str:
        if not isinstance(value, str) or not value.strip():
            raise ValueError("backend_url must be a non-empty string.")
        text = value.strip().rstrip("/")
        if not text.startswith(("http://", "https://")):
            raise ValueError("backend_url must start with http:// or https://.")
        return text

    @staticmethod
    def _coerce_timezone(value: Any) -> str:
        text = str(value or "").strip() or "UTC"
        resolve_zone(text)
        return text

    @staticmethod
    def _coerce_bool(value: Any) -> bool:
        if isinstance(value, bool):
            return value
        if isinstance(value, (int, float)):
            return bool(value)
        if isinstance(value, str):
            return value.strip().lower() in {"1", "true", "yes", "on"}
        return bool(value)

    @staticmethod
    def _coerce_int(name: str, value: Any, *, minimum: Optional[int] = None) -> int:
        if isinstance(value, bool):
            raise ValueError(f"{name} must be an integer.")
        if isinstance(value, (int, float)):
            coerced = int(value)
        elif isinstance(value, str):
            try:
                coerced = int(value.strip())
            except (TypeError, ValueError) as exc:
                raise ValueError(f"{name} must be an integer.") from exc
        else:
            raise ValueError(f"{name} must be an integer.")
        if minimum is not None and coerced < minimum:
            raise ValueError(f"{name} must be at least {minimum}.")
        return coerced


def default_settings_payload() -> dict:
    """Return a fresh snapshot containing the default settings payload."""
    return SettingsVM(config=SettingsConfig()).to_dict()

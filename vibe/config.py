"""Application configuration and platform storage paths."""

from __future__ import annotations

import os
import sys
from dataclasses import asdict, dataclass, fields, replace
from pathlib import Path
from typing import Any, Optional

from jsonschema import Draft202012Validator

from vibe.constants import APP_NAME_ENV, CONFIG_FILENAME, CONTEXT_DIRNAME, DEFAULT_APP_NAME
from vibe.errors import ConfigError
from vibe.schemas import CONFIG_SCHEMA, format_schema_error
from vibe.utils import read_json_safe, write_json


@dataclass(frozen=True)
class AppConfig:
    rules_dir_name: str = ".cursor/rules"
    registry_file_name: str = "registry.json"
    dir_permission: int = 0o755
    file_permission: int = 0o644
    agents_dir_name: str = "cursor-rules"
    source_folder: str = ""
    multi_agent_enabled: bool = False
    last_selected_agent: str = ""
    default_repo_url: str = "https://github.com/nsnarender5511/AgenticSystem"

    def to_payload(self) -> dict[str, Any]:
        return {_camel(key): value for key, value in asdict(self).items()}

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> "AppConfig":
        known = {_camel(item.name): item.name for item in fields(cls)}
        values = {known[key]: value for key, value in payload.items() if key in known}
        return cls(**values)


def _camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.title() for part in rest)


@dataclass(frozen=True)
class AppPaths:
    app_name: str
    config_dir: Path
    data_dir: Path
    cache_dir: Path
    log_dir: Path

    @classmethod
    def for_app(cls, app_name: Optional[str] = None, platform: Optional[str] = None) -> "AppPaths":
        name = app_name or os.environ.get(APP_NAME_ENV) or DEFAULT_APP_NAME
        platform = platform or sys.platform
        if platform.startswith("win"):
            return cls._windows(name)
        if platform == "darwin":
            return cls._darwin(name)
        return cls._unix(name)

    @classmethod
    def _windows(cls, name: str) -> "AppPaths":
        home = Path.home()
        app_data = Path(os.environ.get("APPDATA") or home / "AppData" / "Roaming")
        local = Path(os.environ.get("LOCALAPPDATA") or home / "AppData" / "Local")
        return cls(
            app_name=name,
            config_dir=app_data / name,
            data_dir=local / name,
            cache_dir=local / name / "Cache",
            log_dir=local / name / "Logs",
        )

    @classmethod
    def _darwin(cls, name: str) -> "AppPaths":
        library = Path.home() / "Library"
        return cls(
            app_name=name,
            config_dir=library / "Application Support" / name,
            data_dir=library / "Application Support" / name,
            cache_dir=library / "Caches" / name,
            log_dir=library / "Logs" / name,
        )

    @classmethod
    def _unix(cls, name: str) -> "AppPaths":
        home = Path.home()

        def xdg(var: str, fallback: Path) -> Path:
            value = os.environ.get(var)
            return Path(value) if value else fallback

        return cls(
            app_name=name,
            config_dir=xdg("XDG_CONFIG_HOME", home / ".config") / name,
            data_dir=xdg("XDG_DATA_HOME", home / ".local" / "share") / name,
            cache_dir=xdg("XDG_CACHE_HOME", home / ".cache") / name,
            log_dir=xdg("XDG_STATE_HOME", home / ".local" / "state") / name / "logs",
        )

    @property
    def config_file(self) -> Path:
        return self.config_dir / CONFIG_FILENAME

    @property
    def context_dir(self) -> Path:
        return self.data_dir / CONTEXT_DIRNAME

    def rules_dir(self, config: AppConfig) -> Path:
        return self.data_dir / config.agents_dir_name

    def registry_file(self, config: AppConfig) -> Path:
        return self.data_dir / config.registry_file_name

    def log_file(self, name: str) -> Path:
        return self.log_dir / name


class ConfigRepository:
    def __init__(self, paths: AppPaths) -> None:
        self._paths = paths
        self._validator = Draft202012Validator(CONFIG_SCHEMA)

    @property
    def path(self) -> Path:
        return self._paths.config_file

    def load(self) -> AppConfig:
        payload, error = read_json_safe(self.path)
        if error is not None:
            raise ConfigError(CONFIG_FILENAME, f"invalid JSON ({error})")
        if payload is None:
            return AppConfig()
        if not isinstance(payload, dict):
            raise ConfigError(CONFIG_FILENAME, "must be a JSON object")

        schema_error = next(iter(self._validator.iter_errors(payload)), None)
        if schema_error is not None:
            key = ".".join(str(part) for part in schema_error.path) or CONFIG_FILENAME
            raise ConfigError(key, format_schema_error(schema_error))
        return AppConfig.from_payload(payload)

    def save(self, config: AppConfig) -> None:
        write_json(
            self.path,
            config.to_payload(),
            file_mode=config.file_permission,
            dir_mode=config.dir_permission,
        )

    def update(self, **changes: Any) -> AppConfig:
        config = replace(self.load(), **changes)
        self.save(config)
        return config

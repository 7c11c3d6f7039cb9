"""Configuration loading with priority: env > config file > preset > defaults."""

from __future__ import annotations

import importlib.resources
import os
from pathlib import Path

import yaml
from loguru import logger
from pydantic import BaseModel

CONFIG_PATH = Path("cloudstub.yaml")
SECTION = "cloudstub"

_TRUE = frozenset({"1", "true", "yes", "on"})
_FALSE = frozenset({"0", "false", "no", "off"})


class StubConfig(BaseModel):
    """Settings for registries and stub managers created by the pytest plugin."""

    services: list[str] = ["s3"]
    strict_restore: bool = True

    @staticmethod
    def resolve_path(config_path: Path | None = None) -> Path:
        """Return *config_path*, else $CLOUDSTUB_CONFIG, else ``cloudstub.yaml``."""
        if config_path is not None:
            return config_path
        return Path(os.environ.get("CLOUDSTUB_CONFIG") or CONFIG_PATH)

    @classmethod
    def _from_yaml(cls, text: str, source: str) -> dict[str, object]:
        """Return known keys of the ``cloudstub`` section in YAML *text*."""
        document = yaml.safe_load(text) or {}
        section = document.get(SECTION) if isinstance(document, dict) else None
        if section is None:
            if not isinstance(document, dict):
                logger.warning(f"Invalid config format in {source}; expected mapping.")
            return {}
        if not isinstance(section, dict):
            logger.warning(f"Ignoring {SECTION!r} in {source}; expected mapping.")
            return {}
        return {k: v for k, v in section.items() if k in cls.model_fields}

    @classmethod
    def _from_env(cls) -> dict[str, object]:
        """Return overrides from CLOUDSTUB_SERVICES / CLOUDSTUB_STRICT_RESTORE."""
        overrides: dict[str, object] = {}
        services = [
            s.strip() for s in os.environ.get("CLOUDSTUB_SERVICES", "").split(",")
        ]
        if any(services):
            overrides["services"] = [s for s in services if s]
        strict = os.environ.get("CLOUDSTUB_STRICT_RESTORE")
        if strict is not None:
            value = strict.strip().lower()
            if value in _TRUE | _FALSE:
                overrides["strict_restore"] = value in _TRUE
            else:
                logger.warning(
                    f"Ignoring CLOUDSTUB_STRICT_RESTORE={strict!r}; "
                    "expected true or false."
                )
        return overrides

    @classmethod
    def load(cls, config_path: Path | None = None) -> StubConfig:
        """Merge preset, file, and env: preset < file < env."""
        preset = importlib.resources.files("cloudstub.presets") / "default.yaml"
        merged = cls._from_yaml(preset.read_text(encoding="utf-8"), "preset")
        path = cls.resolve_path(config_path)
        if path.is_file():
            logger.trace(f"Loading config from {path}")
            merged.update(cls._from_yaml(path.read_text(encoding="utf-8"), str(path)))
        merged.update(cls._from_env())
        return cls(**merged)

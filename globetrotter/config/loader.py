from __future__ import annotations

import os
import re
import warnings
from copy import deepcopy
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict

import yaml
from dotenv import load_dotenv
from pydantic import ValidationError

from globetrotter.config.config_models import Settings


PLACEHOLDER_RE = re.compile(r"\$\{([^}:]+)(?::([^\}]+))?\}")
PROJECT_ROOT = Path(__file__).resolve().parents[2]
OVERRIDE_ENV_VAR = "GLOBETROTTER_CONFIG"


def read_yaml_mapping(path: Path) -> Dict[str, Any]:
    """Read `path` and return its top-level mapping (an empty file reads as `{}`)."""
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")
    data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Config file must contain a mapping at top-level: {path}")
    return data


def deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """
    Return a new mapping with `override` layered over `base`.

    Sections present in both are merged key by key; scalars and lists are replaced.

        >>> deep_merge({"budget": {"currency": "USD", "warning_ratio": 0.8}}, {"budget": {"currency": "EUR"}})
        {'budget': {'currency': 'EUR', 'warning_ratio': 0.8}}
    """
    merged = deepcopy(base)
    for key, value in override.items():
        current = merged.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            merged[key] = deep_merge(current, value)
        else:
            merged[key] = deepcopy(value)
    return merged


def _substitute(match: re.Match) -> str:
    name, fallback = match.group(1).strip(), match.group(2)
    value = os.environ.get(name, fallback)
    if value is None:
        raise ValueError(f"Environment variable '{name}' is not defined for placeholder {match.group(0)}")
    return value


def expand_placeholders(node: Any) -> Any:
    """Resolve `${VAR}` / `${VAR:default}` in every string of a parsed YAML tree."""
    if isinstance(node, str):
        return PLACEHOLDER_RE.sub(_substitute, node)
    if isinstance(node, dict):
        return {key: expand_placeholders(item) for key, item in node.items()}
    if isinstance(node, list):
        return [expand_placeholders(item) for item in node]
    return node


class ConfigLoader:
    """
    Builds the validated `Settings` of the service from YAML.

    `globetrotter/config/default.yaml` under `project_root` is always read. One
    override file may be layered on top; the first of these wins:

    1. the `config_path` argument
    2. the GLOBETROTTER_CONFIG environment variable
    3. `<env>.yaml` beside the default file, where env is APP_ENV or `app.env`

    Placeholders are resolved after merging, then the tree is validated.
    """

    def __init__(self, project_root: str | Path, config_path: str | None = None):
        self.project_root = Path(project_root)
        if not self.project_root.exists():
            raise FileNotFoundError(f"Project root not found: {self.project_root}")
        self.config_dir = self.project_root / "globetrotter" / "config"
        self.base_config_path = self.config_dir / "default.yaml"

        # placeholders may refer to values from .env
        load_dotenv(self.project_root / ".env", override=False)

        explicit = config_path or os.getenv(OVERRIDE_ENV_VAR)
        self.override_path: Path | None = Path(explicit) if explicit else None
        self._document: Dict[str, Any] = {}
        self.settings: Settings | None = None

        self._compose()
        self._validate()

    def _environment_file(self, base: Dict[str, Any]) -> Path | None:
        declared = (base.get("app") or {}).get("env")
        env = os.getenv("APP_ENV") or (expand_placeholders(declared) if declared else None)
        if not env:
            return None
        candidate = self.config_dir / f"{env}.yaml"
        if not candidate.exists():
            warnings.warn(f"Config file not found: {candidate}")
            return None
        return candidate

    def _compose(self) -> None:
        """Merge the default and override files and resolve their placeholders."""
        base = read_yaml_mapping(self.base_config_path)
        if self.override_path is None:
            self.override_path = self._environment_file(base)

        document = base
        if self.override_path is not None:
            document = deep_merge(base, read_yaml_mapping(self.override_path))
        self._document = expand_placeholders(document)

    def _validate(self) -> None:
        try:
            self.settings = Settings(**self._document)
        except ValidationError as exc:
            problems = "".join(
                f"error_type:{err['type']} error_location:{err['loc']} error_message:{err['msg']}\n"
                for err in exc.errors()
            )
            raise ValueError(f"An error occurred while validating the configuration: {problems}") from exc

    def get_settings(self) -> Settings:
        if self.settings is None:
            raise RuntimeError("Settings not initialized")
        return self.settings


@lru_cache(maxsize=1)
def get_app_config() -> Settings:
    """Settings from the YAML files shipped with the package, loaded once per process."""
    return ConfigLoader(project_root=PROJECT_ROOT).get_settings()


__all__ = ["ConfigLoader", "get_app_config", "deep_merge", "expand_placeholders", "read_yaml_mapping"]

"""Site configuration resolved from the packaged YAML file and the environment."""
from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

PACKAGE_DIR = Path(__file__).resolve().parent
DEFAULT_CONFIG_FILE = PACKAGE_DIR / "site.yaml"
DEFAULT_LOCALE_DIR = PACKAGE_DIR / "locales"

CONFIG_ENV_VAR = "HOMEPAGE_CONFIG"
ENVIRONMENT_ENV_VAR = "HOMEPAGE_ENV"
LOCALE_DIR_ENV_VAR = "HOMEPAGE_LOCALE_DIR"
BASE_URL_ENV_VAR = "HOMEPAGE_BASE_URL"


class ConfigError(Exception):
    """Raised when a configuration file cannot be used."""


@dataclass(frozen=True)
class SiteConfig:
    """Settings shared by every request of one application instance."""

    base_url: str = "https://nemetz.de"
    locale_dir: Path = DEFAULT_LOCALE_DIR
    environment: str = "production"
    build_id: str = "local-dev"

    @property
    def is_dev(self) -> bool:
        return self.environment == "development"


def _read_yaml(path: Path) -> Dict[str, Any]:
    if not path.exists():
        raise ConfigError(f"Configuration file not found: {path}")

    try:
        with path.open("r", encoding="utf-8") as handle:
            content = yaml.safe_load(handle) or {}
    except yaml.YAMLError as exc:
        raise ConfigError(f"Invalid YAML in {path}: {exc}") from exc

    if not isinstance(content, dict):
        raise ConfigError(f"Configuration root must be a mapping: {path}")
    site = content.get("site", {})
    if not isinstance(site, dict):
        raise ConfigError(f"'site' section must be a mapping: {path}")
    return site


def _resolve_locale_dir(raw: Optional[str], relative_to: Path) -> Path:
    if not raw:
        return DEFAULT_LOCALE_DIR
    path = Path(raw).expanduser()
    if not path.is_absolute():
        path = relative_to / path
    return path.resolve()


def load_config(config_file: Optional[Path] = None) -> SiteConfig:
    """Merge packaged defaults, an optional user YAML file and env overrides."""

    values: Dict[str, Any] = dict(_read_yaml(DEFAULT_CONFIG_FILE))
    locale_base = DEFAULT_CONFIG_FILE.parent

    override = config_file or (Path(os.environ[CONFIG_ENV_VAR]) if os.getenv(CONFIG_ENV_VAR) else None)
    if override is not None:
        override = override.expanduser().resolve()
        user_values = _read_yaml(override)
        values.update(user_values)
        if "locale_dir" in user_values:
            locale_base = override.parent

    locale_dir = (
        Path(os.environ[LOCALE_DIR_ENV_VAR]).expanduser().resolve()
        if os.getenv(LOCALE_DIR_ENV_VAR)
        else _resolve_locale_dir(values.get("locale_dir"), locale_base)
    )

    return SiteConfig(
        base_url=str(os.getenv(BASE_URL_ENV_VAR) or values.get("base_url", SiteConfig.base_url)).rstrip("/"),
        locale_dir=locale_dir,
        environment=os.getenv(ENVIRONMENT_ENV_VAR) or str(values.get("environment", "production")),
        build_id=os.getenv("BUILD_ID", "local-dev"),
    )

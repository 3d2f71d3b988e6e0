"""Configuration for the torii descriptor service.

Values come from environment variables, optionally seeded from an `.env`
file at the repository root. The environment always wins over the file.

Supported keys: `DATABASE_URL` (only needed by the experiment store),
`LOG_DIR`, `LOG_LEVEL`, `APP_NAME`, `DATA_DIR`, `PROVIDERS` (comma separated
provider names to bootstrap) and `DEBUG`.

Usage example:

    from torii.config import load_config

    config = load_config()
    registry = build_registry(config)
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Mapping, MutableMapping, Optional, Tuple

REPO_ROOT = Path(__file__).resolve().parents[1]
DEFAULT_ENV_FILE = REPO_ROOT / ".env"

KNOWN_PROVIDERS = ("riseup", "tunnelbear")
DEFAULT_PROVIDERS = ("riseup",)
_TRUTHY = {"1", "true", "yes", "on"}


def _load_env_file(path: Path) -> Dict[str, str]:
    """Parse a dotenv-style file into a dictionary."""
    if not path.exists():
        return {}

    data: Dict[str, str] = {}
    for raw_line in path.read_text(encoding="utf-8").splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, value = line.split("=", 1)
        data[key.strip()] = value.strip().strip("\"'")
    return data


def _merge_envs(dotenv_values: Mapping[str, str], env: MutableMapping[str, str]) -> Dict[str, str]:
    """Merge dotenv values with the current environment, preferring os.environ."""
    merged = dict(dotenv_values)
    merged.update(env)
    return merged


def _resolve_dir(value: Optional[str], default: Path) -> Path:
    directory = Path(value) if value else default
    if not directory.is_absolute():
        directory = REPO_ROOT / directory
    return directory


def _parse_providers(value: Optional[str]) -> Tuple[str, ...]:
    if not value:
        return DEFAULT_PROVIDERS
    names = tuple(
        dict.fromkeys(part.strip().lower() for part in value.split(",") if part.strip())
    )
    unknown = [name for name in names if name not in KNOWN_PROVIDERS]
    if unknown:
        raise ValueError(
            f"Unknown provider(s) in PROVIDERS: {', '.join(unknown)} "
            f"(known: {', '.join(KNOWN_PROVIDERS)})"
        )
    return names or DEFAULT_PROVIDERS


@dataclass(frozen=True)
class AppConfig:
    """Application-level configuration values."""

    log_directory: Path
    log_level: str
    data_directory: Path
    providers: Tuple[str, ...] = DEFAULT_PROVIDERS
    database_url: Optional[str] = None
    debug: bool = False
    app_name: str = "torii"


def load_config(env_file: Optional[Path] = None) -> AppConfig:
    """Load configuration values using environment defaults."""
    target_file = env_file or DEFAULT_ENV_FILE
    merged = _merge_envs(_load_env_file(target_file), os.environ)

    return AppConfig(
        log_directory=_resolve_dir(merged.get("LOG_DIR"), REPO_ROOT / "logs"),
        log_level=merged.get("LOG_LEVEL", "INFO").upper(),
        data_directory=_resolve_dir(merged.get("DATA_DIR"), REPO_ROOT / "data"),
        providers=_parse_providers(merged.get("PROVIDERS")),
        database_url=merged.get("DATABASE_URL") or None,
        debug=merged.get("DEBUG", "").strip().lower() in _TRUTHY,
        app_name=merged.get("APP_NAME", "torii"),
    )


__all__ = ["AppConfig", "KNOWN_PROVIDERS", "load_config", "REPO_ROOT"]

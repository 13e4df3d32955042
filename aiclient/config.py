"""
Typed configuration model with precedence-based loader.

Precedence (lowest to highest):
    defaults < config file (YAML) < profile < env vars < CLI flags
"""

from __future__ import annotations

import os
from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from typing import Any

import yaml
from dotenv import find_dotenv, load_dotenv

from aiclient.client import DEFAULT_API_URL, DEFAULT_TIMEOUT
from aiclient.errors import ConfigError


# ---------------------------------------------------------------------------
# Section dataclasses
# ---------------------------------------------------------------------------

@dataclass
class ClientConfig:
    api_base: str = DEFAULT_API_URL
    api_key_env: str = "API_KEY"
    model: str = "openai/gpt-4.1"
    timeout_seconds: float = DEFAULT_TIMEOUT
    log_level: str = "INFO"


# ---------------------------------------------------------------------------
# Root config
# ---------------------------------------------------------------------------

@dataclass
class AppConfig:
    client: ClientConfig = field(default_factory=ClientConfig)
    profiles: dict[str, dict[str, Any]] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return asdict(self)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _apply_dotpath(obj: Any, dotpath: str, value: Any) -> None:
    """Walk obj via dotpath and set the final attribute."""
    parts = dotpath.split(".")
    for part in parts[:-1]:
        obj = getattr(obj, part)
    setattr(obj, parts[-1], value)


def _deep_merge(base: dict, overlay: dict) -> dict:
    """Recursively merge overlay into base, returning a new dict."""
    merged = dict(base)
    for k, v in overlay.items():
        if k in merged and isinstance(merged[k], dict) and isinstance(v, dict):
            merged[k] = _deep_merge(merged[k], v)
        else:
            merged[k] = v
    return merged


_FIELD_TYPES: dict[str, type] = {"float": float, "str": str}


def _coerce(value: Any, target_type: type) -> Any:
    """Coerce an env or config-file value to the target type."""
    if target_type is float:
        try:
            return float(value)
        except (TypeError, ValueError):
            raise ConfigError(f"Expected a number, got {value!r}") from None
    return value


def _build_section(cls: type, raw: dict) -> Any:
    """Build a dataclass section from a raw dict, ignoring unknown keys."""
    if not isinstance(raw, dict):
        raise ConfigError(f"Section {cls.__name__} must be a mapping")
    # annotations are strings under postponed evaluation
    filtered = {
        f.name: _coerce(raw[f.name], _FIELD_TYPES.get(str(f.type), str))
        for f in fields(cls)
        if f.name in raw
    }
    return cls(**filtered)


# ---------------------------------------------------------------------------
# ENV var mapping
# ---------------------------------------------------------------------------

_ENV_MAP: dict[str, tuple[str, type]] = {
    "AI_API_BASE":    ("client.api_base", str),
    "AI_API_KEY_ENV": ("client.api_key_env", str),
    "AI_MODEL":       ("client.model", str),
    "AI_TIMEOUT":     ("client.timeout_seconds", float),
    "AI_LOG_LEVEL":   ("client.log_level", str),
}


# ---------------------------------------------------------------------------
# Loader
# ---------------------------------------------------------------------------

def find_config_path() -> Path | None:
    """Find config file in standard locations."""
    candidates = [
        Path.cwd() / "ai.yaml",
        Path.cwd() / "ai.yml",
        Path.home() / ".config" / "aiclient" / "config.yaml",
    ]
    for p in candidates:
        if p.is_file():
            return p
    return None


def load_config(
    config_path: str | Path | None = None,
    *,
    profile: str | None = None,
    cli_overrides: dict[str, Any] | None = None,
) -> AppConfig:
    """
    Build an AppConfig by layering sources in precedence order:

        defaults  <  config file  <  profile  <  env vars  <  CLI flags

    Parameters
    ----------
    config_path : path to YAML config file (optional)
    profile : name of a profile to apply from the config file
    cli_overrides : dict of dotpath -> value CLI flag overrides; ``None``
        values are skipped so unset flags do not clobber lower layers
    """
    raw: dict[str, Any] = {}

    # --- 1. Config file ---
    if config_path is not None:
        p = Path(config_path).expanduser()
        if p.is_file():
            with p.open("r", encoding="utf-8") as f:
                try:
                    file_data = yaml.safe_load(f) or {}
                except yaml.YAMLError as exc:
                    raise ConfigError(f"Invalid config file {p}: {exc}") from exc
            if not isinstance(file_data, dict):
                raise ConfigError(f"Config file {p} must contain a mapping")
            raw = _deep_merge(raw, file_data)

    # --- 2. Profile overlay ---
    if profile:
        profile_data = raw.get("profiles", {}).get(profile)
        if profile_data is None:
            raise ConfigError(f"Unknown profile: {profile}")
        raw = _deep_merge(raw, profile_data)

    # --- Build sections from raw ---
    cfg = AppConfig(
        client=_build_section(ClientConfig, raw.get("client") or {}),
        profiles=raw.get("profiles", {}),
    )

    # --- 3. Env var overrides ---
    for env_var, (dotpath, target_type) in _ENV_MAP.items():
        val = os.environ.get(env_var)
        if val is not None:
            _apply_dotpath(cfg, dotpath, _coerce(val, target_type))

    # --- 4. CLI flag overrides ---
    if cli_overrides:
        for dotpath, value in cli_overrides.items():
            if value is not None:
                _apply_dotpath(cfg, dotpath, value)

    return cfg


def resolve_api_key(cfg: ClientConfig, *, dotenv_path: str | Path | None = None) -> str:
    """Read the API key from the environment, loading a ``.env`` file first.

    Variables already set in the environment win over the ``.env`` file.
    """
    load_dotenv(dotenv_path if dotenv_path is not None else find_dotenv(usecwd=True))
    key = os.environ.get(cfg.api_key_env)
    if not key:
        raise ConfigError(f"{cfg.api_key_env} missing")
    return key

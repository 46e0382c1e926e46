"""Run configuration loading and validation.

Reads extraction settings from an optional YAML file and the environment.
In non-strict mode problems are logged and defaults are used; in strict
mode they raise ``ConfigValidationError``.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field, replace
from typing import Any, Optional

import yaml

from codemap.config import DEFAULT_ENCODING, DEFAULT_INCLUDE_DOCS, DEFAULT_INCLUDE_PRIVATE
from codemap.models import ExtractOptions, Language
from codemap.tokens import normalize_encoding

logger = logging.getLogger(__name__)

OUTPUT_FORMATS = ("text", "json")

_KNOWN_KEYS = {
    "include_docs",
    "include_private",
    "max_workers",
    "encoding",
    "languages",
    "output_format",
    "report_dir",
}


class ConfigValidationError(RuntimeError):
    """Raised when strict configuration validation fails."""


@dataclass(frozen=True)
class RunConfig:
    """Settings for one extraction run."""

    include_docs: bool = DEFAULT_INCLUDE_DOCS
    include_private: bool = DEFAULT_INCLUDE_PRIVATE
    max_workers: Optional[int] = None
    encoding: str = DEFAULT_ENCODING
    languages: tuple[Language, ...] = field(default_factory=tuple)
    output_format: str = "text"
    report_dir: Optional[str] = None

    def to_extract_options(self) -> ExtractOptions:
        return ExtractOptions(include_docs=self.include_docs, include_private=self.include_private)

    def to_dict(self) -> dict[str, Any]:
        return {
            "include_docs": self.include_docs,
            "include_private": self.include_private,
            "max_workers": self.max_workers,
            "encoding": self.encoding,
            "languages": [lang.value for lang in self.languages],
            "output_format": self.output_format,
            "report_dir": self.report_dir,
        }


def _parse_flag(raw: str) -> Optional[bool]:
    value = raw.strip().lower()
    if value in {"1", "true", "yes", "on"}:
        return True
    if value in {"0", "false", "no", "off"}:
        return False
    return None


def _env_flag(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def resolve_strict_config_validation(default: bool = False) -> bool:
    """Resolve strict validation mode from ``STRICT_CONFIG_VALIDATION`` env."""
    return _env_flag("STRICT_CONFIG_VALIDATION", default=default)


def _fail(msg: str, strict: bool) -> None:
    if strict:
        raise ConfigValidationError(msg)
    logger.warning("%s; using default", msg)


def load_yaml_config(config_path: str, strict: bool = False) -> dict[str, Any]:
    """Load a YAML mapping from disk.

    In non-strict mode this returns an empty dict on read/parse failures.
    In strict mode this raises ``ConfigValidationError``.
    """
    try:
        with open(config_path, "r", encoding="utf-8") as f:
            payload = yaml.safe_load(f)
    except FileNotFoundError as exc:
        msg = f"Config file not found: {config_path}"
        if strict:
            raise ConfigValidationError(msg) from exc
        logger.warning("%s; continuing with defaults", msg)
        return {}
    except yaml.YAMLError as exc:
        msg = f"Failed to parse config YAML at {config_path}: {exc}"
        if strict:
            raise ConfigValidationError(msg) from exc
        logger.warning("%s; continuing with defaults", msg)
        return {}

    if payload is None:
        return {}

    if not isinstance(payload, dict):
        msg = f"Unexpected config payload type: {type(payload).__name__}"
        if strict:
            raise ConfigValidationError(msg)
        logger.warning("%s; continuing with defaults", msg)
        return {}

    return payload


def _apply_value(config: RunConfig, key: str, value: Any, strict: bool) -> RunConfig:
    """Validate one setting and return the config with it applied."""
    if key in ("include_docs", "include_private"):
        if isinstance(value, str):
            value = _parse_flag(value)
        if not isinstance(value, bool):
            _fail(f"'{key}' must be a boolean", strict)
            return config
        return replace(config, **{key: value})

    if key == "max_workers":
        if value is None:
            return replace(config, max_workers=None)
        try:
            workers = int(value)
        except (TypeError, ValueError):
            workers = 0
        if workers < 1 or isinstance(value, bool):
            _fail("'max_workers' must be a positive integer", strict)
            return config
        return replace(config, max_workers=workers)

    if key == "encoding":
        try:
            return replace(config, encoding=normalize_encoding(str(value)))
        except ValueError as exc:
            _fail(str(exc), strict)
            return config

    if key == "languages":
        if isinstance(value, str):
            value = [part for part in value.split(",") if part.strip()]
        if not isinstance(value, list):
            _fail("'languages' must be a list of language names", strict)
            return config
        languages = []
        for name in value:
            try:
                languages.append(Language.coerce(str(name).strip()))
            except ValueError:
                _fail(f"Unknown language in 'languages': {name!r}", strict)
        return replace(config, languages=tuple(languages))

    if key == "output_format":
        if value not in OUTPUT_FORMATS:
            _fail(f"'output_format' must be one of {', '.join(OUTPUT_FORMATS)}", strict)
            return config
        return replace(config, output_format=value)

    if key == "report_dir":
        return replace(config, report_dir=str(value) if value else None)

    _fail(f"Unknown config key '{key}'", strict)
    return config


_ENV_OVERRIDES = (
    ("CODEMAP_INCLUDE_DOCS", "include_docs"),
    ("CODEMAP_INCLUDE_PRIVATE", "include_private"),
    ("CODEMAP_MAX_WORKERS", "max_workers"),
    ("CODEMAP_ENCODING", "encoding"),
)


def load_run_config(
    config_path: Optional[str] = None,
    strict: Optional[bool] = None,
) -> RunConfig:
    """Build the run configuration.

    Precedence, lowest first: built-in defaults, the YAML file at
    ``config_path``, then ``CODEMAP_*`` environment variables.

    Args:
        config_path: Optional YAML file.
        strict: Raise on invalid settings. Defaults to the
            ``STRICT_CONFIG_VALIDATION`` environment flag.

    Returns:
        The validated RunConfig.

    Raises:
        ConfigValidationError: In strict mode, on any invalid setting.
    """
    if strict is None:
        strict = resolve_strict_config_validation()

    config = RunConfig()
    if config_path:
        payload = load_yaml_config(config_path, strict=strict)
        for key, value in payload.items():
            if key not in _KNOWN_KEYS:
                _fail(f"Unknown config key '{key}'", strict)
                continue
            config = _apply_value(config, key, value, strict)

    for env_name, key in _ENV_OVERRIDES:
        raw = os.getenv(env_name)
        if raw is None or not raw.strip():
            continue
        config = _apply_value(config, key, raw, strict)

    logger.debug("Resolved run config: %s", config.to_dict())
    return config

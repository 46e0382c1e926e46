"""Core shared utilities: logging context, run configuration, run reports."""

from core.structured_logging import (
    configure_structured_logging,
    file_scope,
    get_run_id,
    phase_scope,
    set_run_id,
)
from core.run_artifacts import build_run_report, write_run_report
from core.startup_config import (
    ConfigValidationError,
    RunConfig,
    load_run_config,
    load_yaml_config,
    resolve_strict_config_validation,
)

__all__ = [
    "configure_structured_logging",
    "file_scope",
    "get_run_id",
    "phase_scope",
    "set_run_id",
    "build_run_report",
    "write_run_report",
    "ConfigValidationError",
    "RunConfig",
    "load_run_config",
    "load_yaml_config",
    "resolve_strict_config_validation",
]

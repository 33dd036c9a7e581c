"""Configuration parsing modules for wirebuild."""

from .ini_parser import CONFIG_FILE, TARGET_ENV_VAR, ProjectConfig

__all__ = [
    "ProjectConfig",
    "CONFIG_FILE",
    "TARGET_ENV_VAR",
]

"""
wirebuild.ini configuration parser.

This module reads the project settings a configuration session needs: the
target project, the root build description and how dependencies are fetched.

Example wirebuild.ini:
    [project]
    target = my_project
    description = wire.py
    default_tag = main
    fetch_method = git
    max_workers = 4
    strict_amendments = false
"""

import configparser
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from ..errors import ConfigurationError

CONFIG_FILE = "wirebuild.ini"
TARGET_ENV_VAR = "WIREBUILD_TARGET"
FETCH_METHODS = ("git", "archive")
# Keys that may be omitted but never left empty; target may be blank
REQUIRED_VALUES = (
    "description",
    "default_tag",
    "fetch_method",
    "max_workers",
    "strict_amendments",
)


@dataclass
class ProjectConfig:
    """Settings for one configuration session.

    Attributes:
        project_dir: Workspace root; dependencies/ is created below it
        target: Configured target project name
        description: Root build description, relative to project_dir
        default_tag: Tag used when fetch_dependency is called without one
        fetch_method: Population backend, "git" or "archive"
        max_workers: Concurrent populations for fetch_dependencies
        strict_amendments: Reject amendments to undefined components
    """

    project_dir: Path
    target: Optional[str] = None
    description: str = "wire.py"
    default_tag: str = "main"
    fetch_method: str = "git"
    max_workers: int = 4
    strict_amendments: bool = False

    @property
    def description_path(self) -> Path:
        return self.project_dir / self.description

    @property
    def output_dir(self) -> Path:
        return self.project_dir / ".wirebuild"

    @classmethod
    def load(cls, project_dir: Path, target: Optional[str] = None) -> "ProjectConfig":
        """
        Load configuration for a project directory.

        A missing wirebuild.ini yields the defaults. The target is taken from,
        in order: the explicit argument, WIREBUILD_TARGET, the ini file.

        Args:
            project_dir: Project directory containing wirebuild.ini
            target: Explicit target override (e.g. from the command line)

        Returns:
            ProjectConfig instance

        Raises:
            ConfigurationError: If the file cannot be parsed or holds invalid values
        """
        project_dir = Path(project_dir).resolve()
        config = cls(project_dir=project_dir)

        ini_path = project_dir / CONFIG_FILE
        if ini_path.exists():
            config._read(ini_path)

        env_target = os.environ.get(TARGET_ENV_VAR)
        if target:
            config.target = target
        elif env_target:
            config.target = env_target

        return config

    def _read(self, ini_path: Path) -> None:
        parser = configparser.ConfigParser(
            allow_no_value=True, interpolation=configparser.ExtendedInterpolation()
        )
        try:
            parser.read(ini_path, encoding="utf-8")
        except configparser.Error as e:
            raise ConfigurationError(f"Failed to parse {ini_path}: {e}") from e

        if "project" not in parser:
            return
        section = parser["project"]

        try:
            for key in REQUIRED_VALUES:
                if key in section and not (section.get(key) or "").strip():
                    raise ConfigurationError(
                        f"'{key}' in the [project] section of {ini_path} needs a value, "
                        + f"e.g. {key} = {getattr(self, key)}"
                    )

            self.target = section.get("target", fallback=self.target) or None
            self.description = section.get("description", fallback=self.description)
            self.default_tag = section.get("default_tag", fallback=self.default_tag)
            self.fetch_method = section.get("fetch_method", fallback=self.fetch_method).strip()
            self.max_workers = section.getint("max_workers", fallback=self.max_workers)
            self.strict_amendments = section.getboolean(
                "strict_amendments", fallback=self.strict_amendments
            )
        except (ValueError, configparser.Error) as e:
            raise ConfigurationError(f"Invalid value in {ini_path}: {e}") from e

        if self.fetch_method not in FETCH_METHODS:
            raise ConfigurationError(
                f"Unknown fetch_method '{self.fetch_method}' in {ini_path}. "
                + f"Use one of: {', '.join(FETCH_METHODS)}"
            )
        if self.max_workers < 1:
            raise ConfigurationError(f"max_workers must be at least 1 in {ini_path}")

"""
Command-line interface for wirebuild.

This module provides the `wire` CLI tool for configuring component-based
C/C++ projects.
"""

import argparse
import sys
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from wirebuild.build import ConfigurationSession
from wirebuild.cli_utils import (
    ErrorFormatter,
    PathValidator,
    TargetSummaryFormatter,
    setup_logging,
)
from wirebuild.config import ProjectConfig
from wirebuild.errors import ConfigurationError, FetchError

TARGETS_FILE = "targets.json"


@dataclass
class ConfigureArgs:
    """Arguments for the configure command."""

    project_dir: Path
    target: Optional[str] = None
    output: Optional[Path] = None
    verbose: bool = False


@dataclass
class FetchArgs:
    """Arguments for the fetch command."""

    locator: str
    tag: Optional[str] = None
    project_dir: Path = Path(".")
    verbose: bool = False


@dataclass
class ComponentsArgs:
    """Arguments for the components command."""

    project_dir: Path
    target: Optional[str] = None
    verbose: bool = False


def configure_command(args: ConfigureArgs) -> None:
    """Evaluate the build description and write the materialized targets.

    Examples:
        wire configure                    # Configure current directory
        wire configure path/to/project    # Configure specific project
        wire configure -t app_unit_test   # Override the target project
        wire configure -o out.json        # Choose the output file
    """
    print("wirebuild configure")
    print()

    try:
        config = ProjectConfig.load(args.project_dir, args.target)
        session = ConfigurationSession.from_config(config)

        start_time = time.time()
        targets = session.run(config.description_path)
        elapsed = time.time() - start_time

        output = args.output or (config.output_dir / TARGETS_FILE)
        targets.save(output)

        ErrorFormatter.print_success("Configuration successful!")
        print()
        print(f"Components: {len(session.registry)}")
        for target in targets:
            print(TargetSummaryFormatter.format(target))
        print()
        print(f"Output: {output}")
        print(f"Configure time: {elapsed:.2f}s")
        sys.exit(0)

    except ConfigurationError as e:
        ErrorFormatter.print_error("Configuration error", str(e))
        sys.exit(1)
    except FetchError as e:
        ErrorFormatter.print_error("Fetch failed", str(e))
        sys.exit(1)
    except KeyboardInterrupt:
        ErrorFormatter.handle_keyboard_interrupt()
    except Exception as e:
        ErrorFormatter.handle_unexpected_error(e, args.verbose)


def fetch_command(args: FetchArgs) -> None:
    """Fetch a single dependency into the project's dependencies/ folder.

    Examples:
        wire fetch https://github.com/LIONant-depot/xcore.git
        wire fetch https://github.com/LIONant-depot/xcore.git v1.2
    """
    try:
        config = ProjectConfig.load(args.project_dir)
        session = ConfigurationSession.from_config(config)
        result = session.fetcher.fetch(args.locator, args.tag)

        if result.populated:
            ErrorFormatter.print_success(f"Fetched {result.spec.name} ({result.spec.tag})")
        else:
            ErrorFormatter.print_success(f"{result.spec.name} already present")
        print(f"Location: {result.spec.local_path}")
        sys.exit(0)

    except ConfigurationError as e:
        ErrorFormatter.print_error("Configuration error", str(e))
        sys.exit(1)
    except FetchError as e:
        ErrorFormatter.print_error("Fetch failed", str(e))
        sys.exit(1)
    except KeyboardInterrupt:
        ErrorFormatter.handle_keyboard_interrupt()
    except Exception as e:
        ErrorFormatter.handle_unexpected_error(e, args.verbose)


def components_command(args: ComponentsArgs) -> None:
    """List the components registered by the build description."""
    try:
        config = ProjectConfig.load(args.project_dir, args.target)
        session = ConfigurationSession.from_config(config)
        session.evaluate(config.description_path)

        for component in session.registry:
            print(f"{component.name}")
            print(f"  root:    {component.root_path}")
            print(f"  group:   {component.group_path}")
            print(f"  files:   {len(component.files)}")
            if component.include_paths:
                print(f"  include: {', '.join(component.include_paths)}")
            if component.linker_paths:
                print(f"  linker:  {', '.join(component.linker_paths)}")
        sys.exit(0)

    except ConfigurationError as e:
        ErrorFormatter.print_error("Configuration error", str(e))
        sys.exit(1)
    except FetchError as e:
        ErrorFormatter.print_error("Fetch failed", str(e))
        sys.exit(1)
    except KeyboardInterrupt:
        ErrorFormatter.handle_keyboard_interrupt()
    except Exception as e:
        ErrorFormatter.handle_unexpected_error(e, args.verbose)


def main() -> None:
    """wirebuild - component wiring for C/C++ build targets."""
    parser = argparse.ArgumentParser(
        prog="wire",
        description="wirebuild - component wiring for C/C++ build targets",
    )
    parser.add_argument(
        "--version",
        action="version",
        version="wirebuild 0.1.0",
    )

    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    # Configure command
    configure_parser = subparsers.add_parser(
        "configure",
        help="Evaluate the build description and materialize targets",
    )
    configure_parser.add_argument(
        "project_dir",
        nargs="?",
        type=Path,
        default=Path.cwd(),
        help="Project directory (default: current directory)",
    )
    configure_parser.add_argument(
        "-t",
        "--target",
        default=None,
        help="Target project (default: from wirebuild.ini or WIREBUILD_TARGET)",
    )
    configure_parser.add_argument(
        "-o",
        "--output",
        type=Path,
        default=None,
        help="Output JSON file (default: .wirebuild/targets.json)",
    )
    configure_parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Show verbose output",
    )

    # Fetch command
    fetch_parser = subparsers.add_parser(
        "fetch",
        help="Fetch a single dependency",
    )
    fetch_parser.add_argument("locator", help="Repository URL")
    fetch_parser.add_argument("tag", nargs="?", default=None, help="Tag or branch (default: main)")
    fetch_parser.add_argument(
        "-d",
        "--project-dir",
        type=Path,
        default=Path.cwd(),
        help="Project directory (default: current directory)",
    )
    fetch_parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Show verbose output",
    )

    # Components command
    components_parser = subparsers.add_parser(
        "components",
        help="List components registered by the build description",
    )
    components_parser.add_argument(
        "project_dir",
        nargs="?",
        type=Path,
        default=Path.cwd(),
        help="Project directory (default: current directory)",
    )
    components_parser.add_argument(
        "-t",
        "--target",
        default=None,
        help="Target project (default: from wirebuild.ini or WIREBUILD_TARGET)",
    )
    components_parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Show verbose output",
    )

    parsed_args = parser.parse_args()

    if not parsed_args.command:
        parser.print_help()
        sys.exit(0)

    PathValidator.validate_project_dir(parsed_args.project_dir)
    setup_logging(parsed_args.verbose)

    if parsed_args.command == "configure":
        configure_command(
            ConfigureArgs(
                project_dir=parsed_args.project_dir,
                target=parsed_args.target,
                output=parsed_args.output,
                verbose=parsed_args.verbose,
            )
        )
    elif parsed_args.command == "fetch":
        fetch_command(
            FetchArgs(
                locator=parsed_args.locator,
                tag=parsed_args.tag,
                project_dir=parsed_args.project_dir,
                verbose=parsed_args.verbose,
            )
        )
    elif parsed_args.command == "components":
        components_command(
            ComponentsArgs(
                project_dir=parsed_args.project_dir,
                target=parsed_args.target,
                verbose=parsed_args.verbose,
            )
        )


if __name__ == "__main__":
    main()

"""Console helpers shared by the wire subcommands.

Colored status lines, target summaries, logging setup and the project
directory check all live here so each command prints the same way.
"""

import logging
import sys
import traceback
from pathlib import Path

from wirebuild.build import BuildTarget

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(verbose: bool = False) -> None:
    """Configure console logging for the CLI.

    Args:
        verbose: Log DEBUG messages instead of INFO
    """
    logger = logging.getLogger("wirebuild")
    logger.setLevel(logging.DEBUG if verbose else logging.INFO)

    if not logger.handlers:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(console_handler)


class ErrorFormatter:
    """Prints colored status and error blocks to stdout."""

    # ANSI color codes
    RED = "\033[1;31m"
    GREEN = "\033[1;32m"
    YELLOW = "\033[1;33m"
    RESET = "\033[0m"

    @staticmethod
    def print_error(title: str, message: str) -> None:
        """Print a red title line followed by the details.

        Args:
            title: Short failure kind, e.g. "Fetch failed"
            message: Details, usually the exception text
        """
        print()
        print(f"{ErrorFormatter.RED}✗ {title}{ErrorFormatter.RESET}")
        print()
        print(message)
        print()

    @staticmethod
    def print_success(message: str) -> None:
        print()
        print(f"{ErrorFormatter.GREEN}✓ {message}{ErrorFormatter.RESET}")

    @staticmethod
    def print_warning(message: str) -> None:
        print()
        print(f"{ErrorFormatter.YELLOW}✗ {message}{ErrorFormatter.RESET}")

    @staticmethod
    def handle_keyboard_interrupt() -> None:
        """Report Ctrl-C and exit with the SIGINT status."""
        ErrorFormatter.print_warning("Configuration interrupted")
        sys.exit(130)

    @staticmethod
    def handle_unexpected_error(error: Exception, verbose: bool = False) -> None:
        """Report an exception no command handled and exit with status 1.

        The traceback is only shown with -v.
        """
        ErrorFormatter.print_error("Unexpected error", f"{type(error).__name__}: {error}")
        if verbose:
            print(traceback.format_exc())

        sys.exit(1)


class TargetSummaryFormatter:
    """Renders a short human readable summary of a materialized target."""

    @staticmethod
    def format(target: BuildTarget) -> str:
        lines = [
            f"Target: {target.name}",
            f"  Sources:       {len(target.sources)}",
            f"  Include dirs:  {len(target.include_dirs)}",
            f"  Linker dirs:   {len(target.link_dirs)}",
        ]
        if target.source_groups:
            lines.append("  Groups:")
            for group, files in target.source_groups.items():
                lines.append(f"    {group} ({len(files)})")
        return "\n".join(lines)


class PathValidator:
    """Checks command line paths before any work starts."""

    @staticmethod
    def validate_project_dir(project_dir: Path) -> None:
        """Exit with status 2 unless project_dir is an existing directory."""
        problem = None
        if not project_dir.exists():
            problem = "does not exist"
        elif not project_dir.is_dir():
            problem = "is not a directory"
        if problem:
            print(f"{ErrorFormatter.RED}✗ Project path {problem}: {project_dir}{ErrorFormatter.RESET}")
            sys.exit(2)

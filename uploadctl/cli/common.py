"""Common CLI utilities, decorators, and helpers."""

from __future__ import annotations

import sys
from functools import wraps
from typing import Any, Callable, Optional, TypeVar

import click

from uploadctl.core.config import Config
from uploadctl.core.exceptions import ConfigurationError, ProfileNotFoundError, UploadCtlError
from uploadctl.core.logging import setup_logging
from uploadctl.core.output import (
    OutputFormat,
    print_error,
    print_info,
    print_success,
    print_warning,
)
from uploadctl.services.notifications import NotificationKind
from uploadctl.uploaders.backends import HttpBackend, SimulatedBackend, TransferBackend

F = TypeVar("F", bound=Callable[..., Any])


# =============================================================================
# Context Object
# =============================================================================


class Context:
    """CLI context object passed to commands."""

    def __init__(self) -> None:
        self.config: Optional[Config] = None
        self.profile_name: Optional[str] = None
        self.output_format: OutputFormat = OutputFormat.TABLE
        self.quiet: bool = False
        self.verbose: bool = False

    def get_config(self) -> Config:
        if self.config is None:
            self.config = Config.load()
        return self.config

    def get_backend(self, *, fail_rate: float = 0.0) -> TransferBackend:
        """Build the transfer backend named by the active profile.

        Args:
            fail_rate: Per-step failure probability for the simulated backend.

        Raises:
            ConfigurationError: If the profile does not exist.
        """
        config = self.get_config()
        try:
            profile = config.get_profile(self.profile_name)
        except ProfileNotFoundError:
            raise ConfigurationError(
                f"Profile '{self.profile_name or config.default_profile}' not found. "
                "Run 'uploadctl config init' to create one."
            ) from None

        if profile.backend == "http":
            if fail_rate:
                print_warning("--fail-rate only applies to the simulated backend")
            return HttpBackend(profile.url, timeout=profile.timeout, verify_ssl=profile.verify_ssl)
        return SimulatedBackend(failure_probability=fail_rate)


pass_context = click.make_pass_decorator(Context, ensure=True)


# =============================================================================
# Notifications
# =============================================================================


class ConsoleNotifier:
    """Shows orchestrator notifications as coloured console lines."""

    def __init__(self, quiet: bool = False) -> None:
        self.quiet = quiet

    def notify(self, kind: NotificationKind, message: str) -> None:
        if kind == NotificationKind.ERROR:
            print_error(message)
        elif self.quiet:
            return
        elif kind == NotificationKind.WARNING:
            print_warning(message)
        elif kind == NotificationKind.SUCCESS:
            print_success(message)
        else:
            print_info(message)


# =============================================================================
# Global Options
# =============================================================================


def global_options(f: F) -> F:
    """Add global options to a command."""

    @click.option(
        "--profile",
        "-p",
        envvar="UPLOADCTL_PROFILE",
        help="Config profile to use",
    )
    @click.option(
        "--output",
        "-o",
        "output_format",
        type=click.Choice(["json", "table"]),
        default="table",
        help="Output format",
    )
    @click.option(
        "--quiet",
        "-q",
        is_flag=True,
        help="Minimal output (names only)",
    )
    @click.option(
        "--verbose",
        "-v",
        is_flag=True,
        help="Enable verbose output",
    )
    @pass_context
    @wraps(f)
    def wrapper(
        ctx: Context,
        profile: Optional[str],
        output_format: str,
        quiet: bool,
        verbose: bool,
        *args: Any,
        **kwargs: Any,
    ) -> Any:
        """Populate context from global options and invoke the command."""
        ctx.profile_name = profile
        ctx.output_format = OutputFormat.from_string(output_format)
        ctx.quiet = quiet
        ctx.verbose = verbose

        setup_logging(quiet=quiet, verbose=verbose)
        ctx.config = None

        return f(ctx, *args, **kwargs)

    return wrapper  # type: ignore


# =============================================================================
# Selection Options
# =============================================================================


def selection_options(f: F) -> F:
    """Add file selection options (type allow-list, filter preset, recursion)."""

    @click.option(
        "--type",
        "-t",
        "types",
        multiple=True,
        help="Allowed extension (repeatable, e.g. -t jpg -t png)",
    )
    @click.option(
        "--filter",
        "-f",
        "filter_name",
        default=None,
        help="Named filter preset (see 'uploadctl filters')",
    )
    @click.option(
        "--recursive",
        "-r",
        is_flag=True,
        help="Descend into subdirectories",
    )
    @wraps(f)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        """Pass through selection options to the command."""
        return f(*args, **kwargs)

    return wrapper  # type: ignore


def resolve_allowed_types(ctx: Context, types: tuple[str, ...], filter_name: Optional[str]) -> list[str]:
    """Combine explicit ``--type`` values with a ``--filter`` preset."""
    allowed = list(types)
    if filter_name:
        allowed.extend(ctx.get_config().resolve_filter(filter_name))
    return allowed


# =============================================================================
# Error Handling
# =============================================================================


def handle_errors(f: F) -> F:
    """Handle common errors and convert to CLI exceptions."""

    @wraps(f)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        """Capture errors and exit with consistent messaging."""
        try:
            return f(*args, **kwargs)
        except UploadCtlError as e:
            print_error(str(e))
            sys.exit(ExitCode.GENERAL_ERROR)
        except click.ClickException:
            raise
        except ValueError as e:
            print_error(str(e))
            sys.exit(ExitCode.USAGE_ERROR)

    return wrapper  # type: ignore


# =============================================================================
# Exit Codes
# =============================================================================


class ExitCode:
    """Standard exit codes."""

    SUCCESS = 0
    GENERAL_ERROR = 1
    USAGE_ERROR = 2

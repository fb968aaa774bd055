"""Core modules for uploadctl."""

from uploadctl.core.config import CONFIG_DIR, CONFIG_FILE, Config, Profile
from uploadctl.core.exceptions import (
    ConfigurationError,
    FileTooLargeError,
    InvalidStatusTransitionError,
    NoPendingFilesError,
    OperationError,
    ProfileNotFoundError,
    SessionBusyError,
    ThumbnailError,
    TransferError,
    TypeNotAllowedError,
    UploadCtlError,
    ValidationError,
)
from uploadctl.core.logging import LogContext, setup_logging
from uploadctl.core.output import (
    OutputFormat,
    console,
    format_file_size,
    format_speed,
    print_error,
    print_json,
    print_output,
    print_success,
    print_table,
    print_warning,
)

__all__ = [
    # Exceptions
    "UploadCtlError",
    "ConfigurationError",
    "ProfileNotFoundError",
    "ValidationError",
    "FileTooLargeError",
    "TypeNotAllowedError",
    "ThumbnailError",
    "OperationError",
    "TransferError",
    "NoPendingFilesError",
    "SessionBusyError",
    "InvalidStatusTransitionError",
    # Config
    "Config",
    "Profile",
    "CONFIG_DIR",
    "CONFIG_FILE",
    # Output
    "OutputFormat",
    "format_file_size",
    "format_speed",
    "print_output",
    "print_table",
    "print_json",
    "print_error",
    "print_warning",
    "print_success",
    "console",
    # Logging
    "setup_logging",
    "LogContext",
]

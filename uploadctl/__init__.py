"""uploadctl - Concurrent file upload sessions with live progress.

This package queues user-selected files and uploads them concurrently:
- Validation against a size limit and an extension allow-list
- Image thumbnails generated in the background
- Per-file and aggregate progress with throughput and ETA
- Simulated and HTTP transfer backends
"""

__version__ = "0.1.0"

from uploadctl.core.config import Config, Profile
from uploadctl.core.exceptions import (
    ConfigurationError,
    NoPendingFilesError,
    SessionBusyError,
    TransferError,
    UploadCtlError,
    ValidationError,
)
from uploadctl.models.source import FileSource
from uploadctl.services.orchestrator import UploadOrchestrator
from uploadctl.uploaders.backends import HttpBackend, SimulatedBackend

__all__ = [
    "__version__",
    "UploadOrchestrator",
    "FileSource",
    "SimulatedBackend",
    "HttpBackend",
    "Config",
    "Profile",
    "UploadCtlError",
    "ConfigurationError",
    "ValidationError",
    "TransferError",
    "NoPendingFilesError",
    "SessionBusyError",
]

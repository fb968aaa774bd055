"""Upload transports for uploadctl.

This module provides the pieces a session is built from:
- Validation of candidate files against size and type policy
- Transfer backends (simulated and HTTP)
- The per-entry transfer executor and its progress channel

These are internal implementation details. Use `UploadOrchestrator` from
`uploadctl.services.orchestrator` as the public API.
"""

from uploadctl.uploaders.backends import (
    HttpBackend,
    ProgressCallback,
    SimulatedBackend,
    TransferBackend,
)
from uploadctl.uploaders.common import (
    ValidationResult,
    collect_files,
    normalize_extensions,
    validate_file,
)
from uploadctl.uploaders.constants import (
    DEFAULT_FILTERS,
    DEFAULT_MAX_CONCURRENCY,
    MAX_FILE_SIZE,
    SESSION_OBSERVATION_DELAY,
    THUMBNAIL_MAX_DIMENSION,
    TRANSFER_STEPS,
)
from uploadctl.uploaders.executor import ProgressChannel, TransferExecutor

__all__ = [
    # Constants
    "DEFAULT_FILTERS",
    "DEFAULT_MAX_CONCURRENCY",
    "MAX_FILE_SIZE",
    "SESSION_OBSERVATION_DELAY",
    "THUMBNAIL_MAX_DIMENSION",
    "TRANSFER_STEPS",
    # Validation
    "ValidationResult",
    "collect_files",
    "normalize_extensions",
    "validate_file",
    # Backends
    "ProgressCallback",
    "TransferBackend",
    "SimulatedBackend",
    "HttpBackend",
    # Executor
    "ProgressChannel",
    "TransferExecutor",
]

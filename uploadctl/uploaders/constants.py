"""Shared constants for uploader and session modules.

The transfer timing values describe the simulated backend. A real backend
reports whatever progress granularity it supports.
"""

# =============================================================================
# Validation Defaults
# =============================================================================

# Largest accepted file, inclusive (100 MiB)
MAX_FILE_SIZE = 100 * 1024 * 1024

# Named extension allow-lists; an empty list accepts every type
DEFAULT_FILTERS: dict[str, list[str]] = {
    "all": [],
    "images": ["jpg", "jpeg", "png", "gif", "webp"],
    "documents": ["pdf", "doc", "docx", "txt"],
    "media": ["mp4", "mp3", "avi", "mov"],
}

# =============================================================================
# Thumbnail Defaults
# =============================================================================

# Larger thumbnail dimension, in pixels
THUMBNAIL_MAX_DIMENSION = 100

# =============================================================================
# Simulated Transfer Defaults
# =============================================================================

TRANSFER_STEPS = 20

# Per-step delay range in seconds
STEP_DELAY_MIN = 0.1
STEP_DELAY_MAX = 0.3

# Occasional network hiccup
STALL_PROBABILITY = 0.1
STALL_DELAY = 0.5

# Server-side processing after the last chunk
FINALIZE_DELAY = 0.3

DEFAULT_REMOTE_BASE_URL = "https://example.com"

# =============================================================================
# HTTP Transfer Defaults
# =============================================================================

DEFAULT_TIMEOUT = 30

# Bytes per streamed request chunk
HTTP_CHUNK_SIZE = 64 * 1024

# =============================================================================
# Session Defaults
# =============================================================================

# Seconds a completed session stays visible before it is discarded
SESSION_OBSERVATION_DELAY = 3.0

# None dispatches every pending entry at once
DEFAULT_MAX_CONCURRENCY: int | None = None

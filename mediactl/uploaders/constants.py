"""Shared constants for the upload pipeline."""

from mediactl.core.config import (
    DEFAULT_FALLBACK_CATEGORY,
    DEFAULT_MAX_FILE_SIZE,
    DEFAULT_MAX_FILES,
    DEFAULT_MIME_PREFIX,
)

# =============================================================================
# Admission Defaults
# =============================================================================

# Files per batch (attached media per post)
MAX_FILES = DEFAULT_MAX_FILES

# Size ceiling per file (5 MiB)
MAX_FILE_SIZE = DEFAULT_MAX_FILE_SIZE

# Accepted mime type prefix
ALLOWED_MIME_PREFIX = DEFAULT_MIME_PREFIX

# =============================================================================
# Backend Endpoints
# =============================================================================

PRESIGN_PATH = "/api/uploads/presign"
PROXY_UPLOAD_PATH = "/api/uploads/proxy-upload"
CONFIRM_PATH = "/api/uploads/confirm"
PRESIGN_GET_PATH = "/api/files/presign-get"

# =============================================================================
# Progress Scale
# =============================================================================

# Transfer progress is remapped into [10, 90] of the task's 0-100 scale
TRANSFER_PROGRESS_START = 10
TRANSFER_PROGRESS_END = 90

# =============================================================================
# Orchestration
# =============================================================================

# Seconds a completed task stays visible before removal
SUCCESS_GRACE_SECONDS = 2.0

# Concurrent pipelines per batch (1 = strictly sequential)
DEFAULT_UPLOAD_WORKERS = 1

# =============================================================================
# Fallback Store
# =============================================================================

FALLBACK_CATEGORY = DEFAULT_FALLBACK_CATEGORY

"""Core application services and configuration."""

from .logging_config import configure_logging
from .settings import Settings, get_settings
from .uploads import SavedUpload, UploadError, UploadTooLargeError, save_upload

__all__ = (
    "Settings",
    "get_settings",
    "configure_logging",
    "SavedUpload",
    "UploadError",
    "UploadTooLargeError",
    "save_upload",
)

"""
Assets component - Upload validation, storage and primary-member ordering.
"""

from ._impl import (
    AssetValidator,
    allocate_storage_name,
    classify_mime_type,
    compute_sha256,
    extract_extension,
)
from .component import STORAGE_ERROR_CODE, AssetService
from .models import BatchOutput, UploadFailure, UploadInput
from .ports import AssetRefRepoPort, LockPort, StoragePort

__all__ = [
    # Service
    "AssetService",
    "STORAGE_ERROR_CODE",
    # Helper functions
    "AssetValidator",
    "allocate_storage_name",
    "classify_mime_type",
    "compute_sha256",
    "extract_extension",
    # Models
    "BatchOutput",
    "UploadFailure",
    "UploadInput",
    # Ports
    "AssetRefRepoPort",
    "LockPort",
    "StoragePort",
]

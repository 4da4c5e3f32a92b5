"""
app/schemas package marker.
"""

from app.schemas.timesheet_upload import (
    ALLOWED_EXTENSIONS,
    RowValidationErrorResponse,
    UploadBatchResponse,
    UploadMetadata,
    ValidationRejectionResponse,
    infer_file_type,
)

__all__ = [
    "ALLOWED_EXTENSIONS",
    "RowValidationErrorResponse",
    "UploadBatchResponse",
    "UploadMetadata",
    "ValidationRejectionResponse",
    "infer_file_type",
]

from typing import Any, Dict, Optional


class AppException(Exception):
    def __init__(
        self,
        message: str,
        status_code: int = 400,
        error_code: str = "BUSINESS_ERROR",
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.status_code = status_code
        self.error_code = error_code
        self.details = details
        super().__init__(self.message)


class ValidationError(AppException):
    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            message=message,
            status_code=400,
            error_code="VALIDATION_ERROR",
            details=details
        )


class AuthenticationError(AppException):
    def __init__(self, message: str = "Could not validate credentials"):
        super().__init__(
            message=message,
            status_code=401,
            error_code="AUTH_FAILED"
        )


class NotFoundError(AppException):
    """Raised for missing, inactive and foreign records alike."""
    def __init__(self, message: str = "Resource not found"):
        super().__init__(
            message=message,
            status_code=404,
            error_code="NOT_FOUND"
        )


class ExtractionError(AppException):
    def __init__(self, message: str = "Unable to parse resume content. Please ensure it's a valid PDF or DOCX file."):
        super().__init__(
            message=message,
            status_code=400,
            error_code="EXTRACTION_FAILED"
        )


class ClassificationRejection(AppException):
    def __init__(self, message: str, rule: str):
        self.rule = rule
        super().__init__(
            message=message,
            status_code=400,
            error_code="CLASSIFICATION_REJECTED",
            details={"rule": rule}
        )


class AnalysisError(AppException):
    """Analyzer failure. The public message stays generic; `reason` is for logs."""
    def __init__(self, reason: str, message: str = "Failed to analyze resume match. Please try again."):
        self.reason = reason
        super().__init__(
            message=message,
            status_code=500,
            error_code="ANALYSIS_FAILED",
            details={"reason": reason}
        )


class StorageError(AppException):
    def __init__(self, message: str = "Storage operation failed. Please try again.", status_code: int = 500):
        super().__init__(
            message=message,
            status_code=status_code,
            error_code="STORAGE_ERROR"
        )


class BlobNotFoundError(StorageError):
    def __init__(self, locator: str = ""):
        self.locator = locator
        super().__init__(message="Resume file not found", status_code=404)
        self.error_code = "BLOB_NOT_FOUND"

"""Error Hierarchy — typed, categorized exceptions for MedSync failure modes.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - Core state transitions never raise for valid-shaped input (clamp / no-op instead)
    - Errors surface only at the shell: API lookups, bootstrap, collaborator calls, closed engine
    - to_response() produces the REST envelope; no internal details leaked

Design Decisions:
    - Single hierarchy with MedSyncError base: FastAPI global handler catches all
    - ErrorContext as dataclass: rich observability without coupling to logging framework
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any
from datetime import datetime, timezone


class ErrorSeverity(str, Enum):
    """Error severity for observability and client handling."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCategory(str, Enum):
    """High-level error categories for routing and handling."""
    VALIDATION = "validation"
    RESOURCE_NOT_FOUND = "resource_not_found"
    EXTERNAL_API = "external_api"
    INTERNAL = "internal"
    CONFLICT = "conflict"


@dataclass
class ErrorContext:
    """Where in the network the failure happened, plus client hints."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    facility_id: str | None = None
    department_id: str | None = None
    item_id: str | None = None
    user_message: str | None = None
    debug_info: dict[str, Any] | None = None
    retry_after_ms: int | None = None

    def located(self) -> dict[str, Any]:
        """Non-empty location and retry fields (debug_info never leaves the process)."""
        fields = {
            "facility_id": self.facility_id,
            "department_id": self.department_id,
            "item_id": self.item_id,
            "retry_after_ms": self.retry_after_ms,
        }
        return {k: v for k, v in fields.items() if v is not None}


class MedSyncError(Exception):
    """Base exception for all MedSync errors."""

    def __init__(
        self,
        message: str,
        code: str,
        category: ErrorCategory,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        context: ErrorContext | None = None,
        http_status: int = 500,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.category = category
        self.severity = severity
        self.context = context or ErrorContext()
        self.http_status = http_status

    def log_extra(self) -> dict[str, Any]:
        """Fields for logger.*(extra=...): error code plus network location."""
        return {"error_code": self.code, **self.context.located()}

    def to_response(self) -> dict:
        """REST envelope; context lists only the fields that are set."""
        return {
            "error": {
                "code": self.code,
                "message": self.context.user_message or self.message,
                "category": self.category.value,
                "severity": self.severity.value,
                "timestamp": self.context.timestamp.isoformat(),
                "context": self.context.located(),
            }
        }


# ─── Domain Errors (400-level) ──────────────────────────────────

class ResourceNotFoundError(MedSyncError):
    """Requested resource does not exist."""
    def __init__(
        self, resource_type: str, resource_id: str, context: ErrorContext | None = None,
    ):
        super().__init__(
            f"{resource_type} '{resource_id}' not found",
            "RESOURCE_NOT_FOUND", ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.ERROR, context, 404,
        )
        self.resource_type = resource_type
        self.resource_id = resource_id


class SeedDataError(MedSyncError):
    """Bootstrap network data is malformed."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            f"Invalid seed data: {message}",
            "SEED_DATA_INVALID", ErrorCategory.VALIDATION,
            ErrorSeverity.CRITICAL, context, 422,
        )


class EngineClosedError(MedSyncError):
    """Restart attempted on a sync engine that was shut down."""
    def __init__(self, operation: str, context: ErrorContext | None = None):
        super().__init__(
            f"Cannot {operation}: sync engine is shut down",
            "ENGINE_CLOSED", ErrorCategory.CONFLICT,
            ErrorSeverity.WARNING, context, 409,
        )
        self.operation = operation


# ─── Infrastructure Errors (500-level) ──────────────────────────

class AnalysisServiceError(MedSyncError):
    """Anthropic API call for network analysis failed."""
    def __init__(
        self,
        message: str,
        api_error_type: str,
        retry_after_ms: int | None = None,
        context: ErrorContext | None = None,
    ):
        ctx = context or ErrorContext()
        ctx.retry_after_ms = retry_after_ms
        super().__init__(
            f"Analysis API error ({api_error_type}): {message}",
            "ANALYSIS_API_ERROR", ErrorCategory.EXTERNAL_API,
            ErrorSeverity.CRITICAL, ctx, 503,
        )
        self.api_error_type = api_error_type

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Dict, Any, List, Union


class ErrorKind(str, Enum):
    TOOL_MISSING = "tool_missing"
    PERMISSION_DENIED = "permission_denied"
    PRECONDITION_UNMET = "precondition_unmet"
    SUBPROCESS_FAILURE = "subprocess_failure"
    VALIDATION_FAILURE = "validation_failure"


# Process exit status for each error kind; cancellation and success exit 0
EXIT_CODES: Dict[ErrorKind, int] = {
    ErrorKind.VALIDATION_FAILURE: 2,
    ErrorKind.TOOL_MISSING: 3,
    ErrorKind.PERMISSION_DENIED: 4,
    ErrorKind.PRECONDITION_UNMET: 5,
    ErrorKind.SUBPROCESS_FAILURE: 6,
}


@dataclass
class SuccessResponse:
    output: str
    success: bool = True
    data: Optional[Dict[str, Any]] = None
    cancelled: bool = False
    warnings: List[str] = field(default_factory=list)

    def __getitem__(self, key: str) -> Any:
        return getattr(self, key)

    def __contains__(self, key: str) -> bool:
        return hasattr(self, key)


@dataclass
class ErrorResponse:
    error: str
    kind: ErrorKind = ErrorKind.SUBPROCESS_FAILURE
    stage: Optional[str] = None
    success: bool = False

    def __getitem__(self, key: str) -> Any:
        return getattr(self, key)

    def __contains__(self, key: str) -> bool:
        return hasattr(self, key)

    @property
    def exit_code(self) -> int:
        return EXIT_CODES.get(self.kind, 1)

    def at_stage(self, stage: str) -> 'ErrorResponse':
        """Tag the error with the stage it aborted, keeping an existing tag."""
        if self.stage is None:
            self.stage = stage
        return self


# Type alias for unified response type
ResponseType = Union[SuccessResponse, ErrorResponse]


class ResponseWrapper:
    """Unified response wrapper for every orchestration step.

    Steps never raise across component boundaries; they hand back either a
    ``SuccessResponse`` or an ``ErrorResponse`` so the caller can branch on
    ``success`` and, for failures, on ``kind``.
    """

    @classmethod
    def success_response(cls, output: str, data: Optional[Dict[str, Any]] = None,
                         warnings: Optional[List[str]] = None) -> SuccessResponse:
        return SuccessResponse(output=output, data=data, warnings=list(warnings or []))

    @classmethod
    def cancelled_response(cls, output: str) -> SuccessResponse:
        """An operator declined a confirmation; nothing was changed."""
        return SuccessResponse(output=output, cancelled=True)

    @classmethod
    def error_response(cls, error: str, kind: ErrorKind = ErrorKind.SUBPROCESS_FAILURE,
                       stage: Optional[str] = None) -> ErrorResponse:
        return ErrorResponse(error=error, kind=kind, stage=stage)

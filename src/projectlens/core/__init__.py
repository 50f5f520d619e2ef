"""Core module exports."""

from projectlens.core.errors import (
    ArgumentError,
    BudgetTooSmallError,
    ConfigError,
    CycleError,
    DuplicateKeyError,
    ErrorCode,
    InternalFault,
    NotFoundError,
    ProjectLensError,
    SchemaError,
    UndefinedVariableError,
    UnknownToolError,
)
from projectlens.core.logging import (
    clear_request_id,
    configure_logging,
    get_logger,
    get_request_id,
    set_request_id,
)

__all__ = [
    # Errors
    "ArgumentError",
    "BudgetTooSmallError",
    "ConfigError",
    "CycleError",
    "DuplicateKeyError",
    "ErrorCode",
    "InternalFault",
    "NotFoundError",
    "ProjectLensError",
    "SchemaError",
    "UndefinedVariableError",
    "UnknownToolError",
    # Logging
    "clear_request_id",
    "configure_logging",
    "get_logger",
    "get_request_id",
    "set_request_id",
]

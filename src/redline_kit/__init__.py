from .errors import (
    ExtractionFailure,
    RedlineKitError,
    RefreshInProgressError,
    StructuralConsistencyError,
)
from .result import Err, Ok, Result

__all__ = [
    "Err",
    "ExtractionFailure",
    "Ok",
    "RedlineKitError",
    "RefreshInProgressError",
    "Result",
    "StructuralConsistencyError",
]

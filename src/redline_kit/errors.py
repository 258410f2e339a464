# src/redline_kit/errors.py

"""Exception types raised by redline-kit.

Reconciliation mismatches are never errors; they are reported in the
reconciliation summary. "No annotations" is a validation value returned
inside ``Err`` (see ``redline_kit.scope.filter``), not an exception.
"""


class RedlineKitError(Exception):
    """Base class for all redline-kit errors."""


class StructuralConsistencyError(RedlineKitError, ValueError):
    """Section ranges from the parser are malformed, overlapping or out of order."""


class ExtractionFailure(RedlineKitError):
    """Host or network failure while parsing or extracting annotations.

    Recoverable: any previously stored snapshot stays valid.
    """


class RefreshInProgressError(RedlineKitError):
    """A refresh with reconciliation is already running for this session."""

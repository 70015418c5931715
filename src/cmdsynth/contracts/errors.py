"""Error types raised across subsystem boundaries.

Most failures in cmdsynth are data, not exceptions: structural defects are
audit findings and window failures are ``Result`` values. The exceptions here
cover the cases where a caller explicitly asks for one.
"""

from enum import StrEnum


class LedgerWindowError(Exception):
    """Raised by ``Result.unwrap()`` when a window failed validation.

    Attributes:
        reason: Machine-readable failure code (e.g., 'window-until-before-since')
    """

    def __init__(self, reason: str) -> None:
        super().__init__(f"Ledger window rejected: {reason}")
        self.reason = reason


class WindowFailure(StrEnum):
    """Failure codes returned by window validation."""

    LIMIT_NON_POSITIVE = "window-limit-non-positive"
    UNTIL_BEFORE_SINCE = "window-until-before-since"

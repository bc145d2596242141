"""Exit codes for the release command.

Every terminal condition of a release run maps to its own non-zero code so
wrapper scripts can tell where the run stopped.
"""

from enum import IntEnum

__all__ = ["ErrorCode"]


class ErrorCode(IntEnum):
    """Process exit codes.

    - 0: Success (including a successful dry run)
    - 1: Usage error (missing argument, bad flag, invalid configuration)
    - 2: Version error (unparseable version, version not greater than current)
    - 3: File error (manifest pattern missing, changelog not writable)
    - 4: One or more pre-release checks failed
    - 5: A release step failed
    """

    OK = 0
    USAGE_ERROR = 1
    VERSION_ERROR = 2
    FILE_ERROR = 3
    CHECK_FAILED = 4
    STEP_FAILED = 5

    def __str__(self) -> str:
        return self.name.lower().replace("_", " ")

    @property
    def is_success(self) -> bool:
        return self == ErrorCode.OK

    @property
    def is_error(self) -> bool:
        return self != ErrorCode.OK

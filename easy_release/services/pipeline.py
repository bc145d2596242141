# SPDX-License-Identifier: MIT
"""Ordered execution of checks and release steps.

Both modes walk a fixed list of ``{description, skip, action}`` entries in
order, on the calling thread, printing one status line per entry before
moving to the next. They differ in how failures are handled:

- ``run_checks`` runs every entry even after a failure, so one pass reports
  everything that is wrong.
- ``run_steps`` stops at the first failure, because each release step relies
  on the previous one. Completed steps are left in place.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass
from enum import Enum, auto

from easy_release.output.console import ConsoleProtocol, Style

__all__ = [
    "CheckOutcome",
    "CheckRecord",
    "CheckSpec",
    "CheckStatus",
    "Done",
    "Failed",
    "Passed",
    "PipelineResult",
    "Skipped",
    "StepOutcome",
    "StepRecord",
    "StepSpec",
    "StepsResult",
    "run_checks",
    "run_steps",
]

NOT_AVAILABLE = "not available"


@dataclass(frozen=True, slots=True)
class Passed:
    """The check's condition holds."""


@dataclass(frozen=True, slots=True)
class Done:
    """The step completed."""


@dataclass(frozen=True, slots=True)
class Skipped:
    """The underlying capability is unavailable (e.g. optional tool missing)."""

    reason: str | None = None


@dataclass(frozen=True, slots=True)
class Failed:
    reason: str


type CheckOutcome = Passed | Skipped | Failed
type StepOutcome = Done | Skipped | Failed


class CheckStatus(Enum):
    PASSED = auto()
    SKIPPED = auto()
    FAILED = auto()


@dataclass(frozen=True, slots=True)
class CheckSpec:
    """A read-only pre-release check.

    Attributes:
        id: Stable identifier (e.g. "vcs-clean")
        description: Line shown to the user
        skip: True when the user asked to skip this check
        predicate: Evaluates the check; must not mutate anything
    """

    id: str
    description: str
    skip: bool
    predicate: Callable[[], CheckOutcome]


@dataclass(frozen=True, slots=True)
class StepSpec:
    """A release step; may change files, the local repository or remotes."""

    description: str
    action: Callable[[], StepOutcome]
    skip: bool = False


@dataclass(frozen=True, slots=True)
class CheckRecord:
    id: str
    description: str
    status: CheckStatus
    detail: str | None = None


@dataclass(frozen=True, slots=True)
class PipelineResult:
    """Outcome of the checks phase, in execution order."""

    records: tuple[CheckRecord, ...]

    def _count(self, status: CheckStatus) -> int:
        return sum(1 for r in self.records if r.status == status)

    @property
    def passed(self) -> int:
        return self._count(CheckStatus.PASSED)

    @property
    def skipped(self) -> int:
        return self._count(CheckStatus.SKIPPED)

    @property
    def failed(self) -> int:
        return self._count(CheckStatus.FAILED)

    @property
    def ok(self) -> bool:
        return self.failed == 0

    def status_of(self, check_id: str) -> CheckStatus | None:
        for r in self.records:
            if r.id == check_id:
                return r.status
        return None


@dataclass(frozen=True, slots=True)
class StepRecord:
    description: str
    outcome: StepOutcome


@dataclass(frozen=True, slots=True)
class StepsResult:
    """Steps that actually ran, in order; the last one failed if not ok."""

    records: tuple[StepRecord, ...]

    @property
    def failure(self) -> StepRecord | None:
        if self.records and isinstance(self.records[-1].outcome, Failed):
            return self.records[-1]
        return None

    @property
    def ok(self) -> bool:
        return self.failure is None


def _evaluate[T](action: Callable[[], T | Failed]) -> T | Failed:
    try:
        return action()
    except OSError as e:
        return Failed(str(e))


def run_checks(checks: Sequence[CheckSpec], console: ConsoleProtocol) -> PipelineResult:
    """Run every check and print a status line for each, then the totals."""
    records: list[CheckRecord] = []
    for check in checks:
        record = _run_check(check)
        _print_check(console, record)
        records.append(record)

    result = PipelineResult(records=tuple(records))
    console.newline()
    console.print(
        f"Passed: {result.passed}  Skipped: {result.skipped}  Failed: {result.failed}",
        Style.BOLD,
    )
    console.newline()
    return result


def _run_check(check: CheckSpec) -> CheckRecord:
    if check.skip:
        return CheckRecord(check.id, check.description, CheckStatus.SKIPPED)

    match _evaluate(check.predicate):
        case Passed():
            return CheckRecord(check.id, check.description, CheckStatus.PASSED)
        case Skipped(reason):
            return CheckRecord(
                check.id, check.description, CheckStatus.SKIPPED, reason or NOT_AVAILABLE
            )
        case Failed(reason):
            return CheckRecord(check.id, check.description, CheckStatus.FAILED, reason)


def _print_check(console: ConsoleProtocol, record: CheckRecord) -> None:
    symbol, style = {
        CheckStatus.PASSED: ("✓", Style.SUCCESS),
        CheckStatus.SKIPPED: ("○", Style.WARNING),
        CheckStatus.FAILED: ("✗", Style.ERROR),
    }[record.status]
    suffix = f" ({record.detail})" if record.detail else ""
    console.print(f"{symbol} {record.description}{suffix}", style)


def run_steps(steps: Sequence[StepSpec], console: ConsoleProtocol) -> StepsResult:
    """Run steps in order, halting at the first failure.

    Steps the user skipped are passed over silently.
    """
    records: list[StepRecord] = []
    for step in steps:
        if step.skip:
            continue

        console.print(f"→ {step.description}...", Style.INFO)
        outcome = _evaluate(step.action)
        records.append(StepRecord(step.description, outcome))

        match outcome:
            case Done():
                console.print("  ✓ Done", Style.SUCCESS)
            case Skipped(reason):
                suffix = f" ({reason})" if reason else ""
                console.print(f"  ○ Skipped{suffix}", Style.WARNING)
            case Failed(reason):
                console.print(f"  ✗ Failed: {reason}", Style.ERROR)
                break

    return StepsResult(records=tuple(records))

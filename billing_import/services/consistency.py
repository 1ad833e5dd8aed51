from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import Enum

from ..models.columns import BILLING_CYCLE_COLUMN, GROUP_COLUMN, IDENTITY_COLUMNS
from ..models.import_result import Rejection, RejectionKind
from ..models.row_data import NormalizedRow

"""Cross-row consistency checks over one batch.

Rows sharing a ``TEN_FILE`` value form one notice. Within a notice:

- identity: every row must carry the same (EMAIL, TEN_TT, DIACHI_TT) tuple
- billing cycle: every row must carry the same non-blank CHUKYNO

All comparisons are case-insensitive, group keys included. Group keys are
reported with the spelling of their first occurrence, groups in order of first
appearance. Both checks always run over the whole batch; the caller decides
what to do with the findings.
"""

__all__ = [
    "BillingCycleCause",
    "BillingCycleIssue",
    "ConsistencyReport",
    "check_billing_cycle_consistency",
    "check_identity_consistency",
    "validate_batch",
]


class BillingCycleCause(Enum):
    NO_VALUE = "no value"
    BLANK_ROWS = "blank rows present"
    MULTIPLE_VALUES = "multiple distinct values"


@dataclass(frozen=True)
class BillingCycleIssue:
    group: str
    cause: BillingCycleCause
    values: tuple[str, ...]  # distinct non-blank values, sorted
    has_blank: bool

    @property
    def message(self) -> str:
        if self.cause is BillingCycleCause.NO_VALUE:
            return f"TEN_FILE='{self.group}': CHUKYNO has no value"
        if self.cause is BillingCycleCause.BLANK_ROWS:
            return f"TEN_FILE='{self.group}': CHUKYNO '{self.values[0]}' but blank rows present"
        blank = " (blank rows present as well)" if self.has_blank else ""
        return (
            f"TEN_FILE='{self.group}': multiple distinct values of CHUKYNO: "
            f"{', '.join(self.values)}{blank}"
        )


@dataclass
class ConsistencyReport:
    """Findings of one ``validate_batch`` call."""
    identity_conflicts: dict[str, int] = field(default_factory=dict)  # group -> distinct tuples
    billing_cycle_issues: list[BillingCycleIssue] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.identity_conflicts and not self.billing_cycle_issues

    def rejections(self) -> list[Rejection]:
        result = [
            Rejection(
                kind=RejectionKind.IDENTITY_INCONSISTENCY,
                message=(
                    f"TEN_FILE='{group}': {count} different (EMAIL, TEN_TT, DIACHI_TT) "
                    "combinations"
                ),
                detail={"group": group, "count": count},
            )
            for group, count in self.identity_conflicts.items()
        ]
        result.extend(
            Rejection(
                kind=RejectionKind.BILLING_CYCLE_INCONSISTENCY,
                message=issue.message,
                detail={
                    "group": issue.group,
                    "cause": issue.cause.value,
                    "values": list(issue.values),
                    "has_blank": issue.has_blank,
                },
            )
            for issue in self.billing_cycle_issues
        )
        return result


class _GroupKeys:
    """Case-insensitive group key registry remembering the first spelling."""

    def __init__(self) -> None:
        self.display: dict[str, str] = {}

    def fold(self, row: NormalizedRow) -> str:
        raw = row.text(GROUP_COLUMN)
        key = raw.casefold()
        self.display.setdefault(key, raw)
        return key


def check_identity_consistency(rows: Iterable[NormalizedRow]) -> dict[str, int]:
    """Return group -> number of distinct identity tuples, for groups with more than one."""
    keys = _GroupKeys()
    tuples: dict[str, set[tuple[str, ...]]] = {}
    for row in rows:
        group = keys.fold(row)
        identity = tuple(row.text(col).casefold() for col in IDENTITY_COLUMNS)
        tuples.setdefault(group, set()).add(identity)
    return {keys.display[g]: len(s) for g, s in tuples.items() if len(s) > 1}


def check_billing_cycle_consistency(rows: Iterable[NormalizedRow]) -> list[BillingCycleIssue]:
    """Return one issue per group whose CHUKYNO is not a single non-blank value."""
    keys = _GroupKeys()
    values: dict[str, dict[str, str]] = {}  # group -> folded value -> first spelling
    blanks: dict[str, bool] = {}
    for row in rows:
        group = keys.fold(row)
        seen = values.setdefault(group, {})
        blanks.setdefault(group, False)
        cycle = row.text(BILLING_CYCLE_COLUMN)
        if not cycle:
            blanks[group] = True
        else:
            seen.setdefault(cycle.casefold(), cycle)

    issues: list[BillingCycleIssue] = []
    for group, seen in values.items():
        distinct = tuple(sorted(seen.values()))
        has_blank = blanks[group]
        if len(distinct) == 1 and not has_blank:
            continue
        if not distinct:
            cause = BillingCycleCause.NO_VALUE
        elif len(distinct) > 1:
            cause = BillingCycleCause.MULTIPLE_VALUES
        else:
            cause = BillingCycleCause.BLANK_ROWS
        issues.append(
            BillingCycleIssue(group=keys.display[group], cause=cause, values=distinct, has_blank=has_blank)
        )
    return issues


def validate_batch(rows: list[NormalizedRow]) -> ConsistencyReport:
    """Run both checks over the whole batch."""
    return ConsistencyReport(
        identity_conflicts=check_identity_consistency(rows),
        billing_cycle_issues=check_billing_cycle_consistency(rows),
    )

from __future__ import annotations

from billing_import.models.columns import (
    ADDRESS_COLUMN,
    BILLING_CYCLE_COLUMN,
    EMAIL_COLUMN,
    GROUP_COLUMN,
    NAME_COLUMN,
)
from billing_import.models.import_result import RejectionKind
from billing_import.models.row_data import NormalizedRow
from billing_import.services.consistency import (
    BillingCycleCause,
    check_billing_cycle_consistency,
    check_identity_consistency,
    validate_batch,
)


def _row(n, group, cycle="01/2024", email="a@x.vn", name="Cong ty A", address="1 Le Loi"):
    return NormalizedRow(
        row_number=n,
        values={
            GROUP_COLUMN: group,
            BILLING_CYCLE_COLUMN: cycle,
            EMAIL_COLUMN: email,
            NAME_COLUMN: name,
            ADDRESS_COLUMN: address,
        },
    )


def test_consistent_batch_has_no_findings():
    rows = [_row(2, "BK1"), _row(3, "BK1"), _row(4, "BK2", email="b@x.vn")]
    report = validate_batch(rows)
    assert report.ok
    assert report.rejections() == []


def test_identity_conflict_counts_distinct_tuples():
    rows = [
        _row(2, "BK1"),
        _row(3, "BK1", name="Cong ty B"),
        _row(4, "BK1", address="2 Tran Hung Dao"),
        _row(5, "BK2"),
    ]
    assert check_identity_consistency(rows) == {"BK1": 3}


def test_identity_comparison_ignores_case():
    rows = [_row(2, "BK1", email="A@X.VN"), _row(3, "BK1", email="a@x.vn", name="CONG TY A")]
    assert check_identity_consistency(rows) == {}


def test_group_keys_are_case_insensitive_first_spelling_reported():
    rows = [_row(2, "bk1"), _row(3, "BK1", email="other@x.vn")]
    assert check_identity_consistency(rows) == {"bk1": 2}


def test_null_identity_fields_compare_as_empty():
    rows = [_row(2, "BK1", email=None), _row(3, "BK1", email="")]
    assert check_identity_consistency(rows) == {}


def test_billing_cycle_blank_rows():
    rows = [_row(2, "BK1", cycle="01/2024"), _row(3, "BK1", cycle=None)]
    [issue] = check_billing_cycle_consistency(rows)
    assert issue.group == "BK1"
    assert issue.cause is BillingCycleCause.BLANK_ROWS
    assert issue.values == ("01/2024",)
    assert "blank rows present" in issue.message


def test_billing_cycle_multiple_values_sorted():
    rows = [_row(2, "BK1", cycle="02/2024"), _row(3, "BK1", cycle="01/2024")]
    [issue] = check_billing_cycle_consistency(rows)
    assert issue.cause is BillingCycleCause.MULTIPLE_VALUES
    assert issue.values == ("01/2024", "02/2024")
    assert "multiple distinct values" in issue.message
    assert "01/2024, 02/2024" in issue.message


def test_billing_cycle_no_value():
    rows = [_row(2, "BK1", cycle=None), _row(3, "BK1", cycle="  ")]
    [issue] = check_billing_cycle_consistency(rows)
    assert issue.cause is BillingCycleCause.NO_VALUE
    assert issue.values == ()
    assert "no value" in issue.message


def test_billing_cycle_comparison_ignores_case():
    rows = [_row(2, "BK1", cycle="Q1/2024"), _row(3, "BK1", cycle="q1/2024")]
    assert check_billing_cycle_consistency(rows) == []


def test_validate_batch_reports_both_kinds():
    rows = [
        _row(2, "BK1"),
        _row(3, "BK1", email="other@x.vn"),
        _row(4, "BK2", cycle="01/2024"),
        _row(5, "BK2", cycle="02/2024"),
    ]
    report = validate_batch(rows)
    assert not report.ok
    rejections = report.rejections()
    assert [r.kind for r in rejections] == [
        RejectionKind.IDENTITY_INCONSISTENCY,
        RejectionKind.BILLING_CYCLE_INCONSISTENCY,
    ]
    assert [r.group for r in rejections] == ["BK1", "BK2"]
    assert rejections[0].detail["count"] == 2


def test_validate_batch_is_independent_between_calls():
    bad = [_row(2, "BK1"), _row(3, "BK1", email="other@x.vn")]
    assert not validate_batch(bad).ok
    assert validate_batch([_row(2, "BK1")]).ok

import pytest

from app.core.exceptions import InvalidConfigurationError, InvalidStateError
from app.models.base.enums import GatePassAction, GatePassStatus
from app.models.gate_pass.gate_pass import GatePass
from app.services.gate_pass.gate_pass_state import (
    ApprovedExited,
    ApprovedNotExited,
    ClosedLate,
    ClosedOnTime,
    GatePassLimits,
    MovementGuard,
    PendingParent,
    PendingWarden,
    Rejected,
    lift,
)

from tests.conftest import utc

FROM = utc(2026, 3, 10, 10)
TO = utc(2026, 3, 12, 18)


def _row(status, exit_time=None, entry_time=None, is_late=False):
    return GatePass(
        id="pass-1",
        student_id="student-1",
        reason="Visiting home",
        from_date=FROM,
        to_date=TO,
        status=status,
        exit_time=exit_time,
        entry_time=entry_time,
        is_late=is_late,
    )


@pytest.mark.parametrize(
    "row,expected",
    [
        (_row(GatePassStatus.PENDING_PARENT), PendingParent),
        (_row(GatePassStatus.PENDING_WARDEN), PendingWarden),
        (_row(GatePassStatus.APPROVED), ApprovedNotExited),
        (_row(GatePassStatus.APPROVED, exit_time=utc(2026, 3, 10, 11)), ApprovedExited),
        (_row(GatePassStatus.CLOSED, utc(2026, 3, 10, 11), utc(2026, 3, 11, 9)), ClosedOnTime),
        (_row(GatePassStatus.CLOSED, utc(2026, 3, 10, 11), utc(2026, 3, 13, 9), is_late=True), ClosedLate),
        (_row(GatePassStatus.REJECTED), Rejected),
    ],
)
def test_lift_picks_variant(row, expected):
    assert type(lift(row)) is expected


def test_parent_approval_moves_to_warden():
    transition = PendingParent("pass-1").parent_decide(True, "parent-1", FROM)
    assert transition.expected_status == GatePassStatus.PENDING_PARENT
    assert transition.new_status == GatePassStatus.PENDING_WARDEN
    assert transition.values["parent_approved"] is True
    assert transition.guard == MovementGuard.NONE
    assert transition.action is None


def test_parent_rejection_ends_pass():
    transition = PendingParent("pass-1").parent_decide(False, "parent-1", FROM, reason="Exams next week")
    assert transition.new_status == GatePassStatus.REJECTED
    assert transition.values["parent_reason"] == "Exams next week"


def test_warden_approval_issues_qr_value():
    transition = PendingWarden("pass-1").warden_decide(True, "warden-1", FROM, qr_value="GP-ABCD1234")
    assert transition.new_status == GatePassStatus.APPROVED
    assert transition.values["qr_value"] == "GP-ABCD1234"


def test_warden_rejection_does_not_issue_qr_value():
    transition = PendingWarden("pass-1").warden_decide(False, "warden-1", FROM, qr_value="GP-ABCD1234")
    assert transition.new_status == GatePassStatus.REJECTED
    assert "qr_value" not in transition.values


def test_exit_keeps_status_and_requires_not_exited():
    transition = ApprovedNotExited("pass-1", from_date=FROM, to_date=TO).record_exit(utc(2026, 3, 10, 12), "guard-1")
    assert transition.new_status == GatePassStatus.APPROVED
    assert transition.guard == MovementGuard.NOT_EXITED
    assert transition.action == GatePassAction.EXIT
    assert transition.values == {"exit_time": utc(2026, 3, 10, 12), "exit_marked_by": "guard-1"}


def test_exit_after_return_time_is_refused():
    with pytest.raises(InvalidStateError, match="expired"):
        ApprovedNotExited("pass-1", from_date=FROM, to_date=TO).record_exit(utc(2026, 3, 12, 18, 1))


@pytest.mark.parametrize(
    "entry_time,late",
    [
        (utc(2026, 3, 12, 17), False),
        (TO, False),
        (utc(2026, 3, 12, 18, 1), True),
    ],
)
def test_entry_closes_pass_and_flags_lateness(entry_time, late):
    state = ApprovedExited("pass-1", exit_time=utc(2026, 3, 10, 12), to_date=TO)
    transition = state.record_entry(entry_time, "guard-1")
    assert transition.new_status == GatePassStatus.CLOSED
    assert transition.guard == MovementGuard.OUT
    assert transition.action == GatePassAction.ENTRY
    assert transition.values["is_late"] is late


def test_entry_before_exit_is_refused():
    state = ApprovedExited("pass-1", exit_time=utc(2026, 3, 10, 12), to_date=TO)
    with pytest.raises(InvalidStateError):
        state.record_entry(utc(2026, 3, 10, 11))


@pytest.mark.parametrize(
    "state,action",
    [
        (PendingParent("pass-1"), lambda s: s.warden_decide(True, "w", FROM)),
        (PendingParent("pass-1"), lambda s: s.record_exit(FROM)),
        (PendingWarden("pass-1"), lambda s: s.parent_decide(True, "p", FROM)),
        (PendingWarden("pass-1"), lambda s: s.record_entry(FROM)),
        (ApprovedNotExited("pass-1", from_date=FROM, to_date=TO), lambda s: s.record_entry(FROM)),
        (ApprovedExited("pass-1", exit_time=FROM, to_date=TO), lambda s: s.record_exit(FROM)),
        (ClosedOnTime("pass-1"), lambda s: s.record_entry(TO)),
        (ClosedLate("pass-1"), lambda s: s.parent_decide(True, "p", FROM)),
        (Rejected("pass-1"), lambda s: s.warden_decide(True, "w", FROM)),
    ],
)
def test_illegal_transitions_raise(state, action):
    with pytest.raises(InvalidStateError) as exc_info:
        action(state)
    assert exc_info.value.details["current_status"] == state.status.value


def test_terminal_states_allow_nothing():
    for state in (ClosedOnTime("p"), ClosedLate("p"), Rejected("p")):
        assert state.allowed_actions == frozenset()
        assert state.status.is_terminal


@pytest.mark.parametrize("kwargs", [{"max_gate_pass_days": 0}, {"max_pending_passes": -1}, {"max_gate_pass_days": 2.5}])
def test_limits_must_be_positive_integers(kwargs):
    with pytest.raises(InvalidConfigurationError):
        GatePassLimits(**kwargs)

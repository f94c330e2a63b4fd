"""
Gate pass lifecycle as a tagged variant.

The stored row keeps a flat status plus exit/entry timestamps. Before any
write the row is lifted into one of the variants below; each variant
implements only the transitions its state allows and every other
transition raises ``InvalidStateError``. A successful transition returns
a ``Transition`` describing the conditional update to apply, it never
touches the database itself.

    PendingParent --parent approves--> PendingWarden --warden approves--> ApprovedNotExited
         |                                  |                                  |
         +----------- rejects --------------+--> Rejected                   exit
                                                                               v
                              ClosedOnTime / ClosedLate <--entry-- ApprovedExited
"""

import enum
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, FrozenSet, Optional

from app.core.exceptions import InvalidConfigurationError, InvalidStateError
from app.models.base.enums import GatePassAction, GatePassStatus
from app.models.gate_pass.gate_pass import GatePass
from app.utils.datetime_utils import coerce_utc

__all__ = [
    "GatePassLimits",
    "MovementGuard",
    "Transition",
    "PassState",
    "PendingParent",
    "PendingWarden",
    "ApprovedNotExited",
    "ApprovedExited",
    "ClosedOnTime",
    "ClosedLate",
    "Rejected",
    "lift",
]


@dataclass(frozen=True)
class GatePassLimits:
    """Per-student gate pass limits."""

    max_gate_pass_days: int = 14
    max_pending_passes: int = 3

    def __post_init__(self):
        for key in ("max_gate_pass_days", "max_pending_passes"):
            value = getattr(self, key)
            if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
                raise InvalidConfigurationError(key, value, f"{key} must be a positive integer")


class MovementGuard(str, enum.Enum):
    """Extra row condition a transition needs besides the expected status."""

    NONE = "none"
    NOT_EXITED = "not_exited"
    OUT = "out"


@dataclass(frozen=True)
class Transition:
    """Conditional update produced by a legal transition."""

    pass_id: str
    expected_status: GatePassStatus
    new_status: GatePassStatus
    values: Dict[str, Any]
    guard: MovementGuard = MovementGuard.NONE
    action: Optional[GatePassAction] = None


@dataclass(frozen=True)
class PassState:
    """
    Base variant. Every transition is refused here; subclasses override
    the ones their state permits.
    """

    pass_id: str
    status: GatePassStatus = field(init=False)
    allowed_actions: FrozenSet[str] = field(init=False, default=frozenset())

    @property
    def name(self) -> str:
        return type(self).__name__

    def _refuse(self, action: str) -> InvalidStateError:
        return InvalidStateError(
            f"Cannot {action} a gate pass in state {self.name}",
            pass_id=self.pass_id,
            current_status=self.status.value,
        )

    def parent_decide(self, approve: bool, decided_by: Optional[str], at: datetime,
                      reason: Optional[str] = None) -> Transition:
        raise self._refuse("record a parent decision on")

    def warden_decide(self, approve: bool, decided_by: Optional[str], at: datetime,
                      reason: Optional[str] = None, qr_value: Optional[str] = None) -> Transition:
        raise self._refuse("record a warden decision on")

    def record_exit(self, at: datetime, marked_by: Optional[str] = None) -> Transition:
        raise self._refuse("record an exit on")

    def record_entry(self, at: datetime, marked_by: Optional[str] = None) -> Transition:
        raise self._refuse("record an entry on")


@dataclass(frozen=True)
class PendingParent(PassState):
    status: GatePassStatus = field(init=False, default=GatePassStatus.PENDING_PARENT)
    allowed_actions: FrozenSet[str] = field(init=False, default=frozenset({"parent_decide"}))

    def parent_decide(self, approve, decided_by, at, reason=None):
        return Transition(
            pass_id=self.pass_id,
            expected_status=self.status,
            new_status=GatePassStatus.PENDING_WARDEN if approve else GatePassStatus.REJECTED,
            values={
                "parent_approved": approve,
                "parent_decided_by": decided_by,
                "parent_decided_at": at,
                "parent_reason": reason,
            },
        )


@dataclass(frozen=True)
class PendingWarden(PassState):
    status: GatePassStatus = field(init=False, default=GatePassStatus.PENDING_WARDEN)
    allowed_actions: FrozenSet[str] = field(init=False, default=frozenset({"warden_decide"}))

    def warden_decide(self, approve, decided_by, at, reason=None, qr_value=None):
        values = {
            "warden_approved": approve,
            "warden_decided_by": decided_by,
            "warden_decided_at": at,
            "warden_reason": reason,
        }
        if approve:
            values["qr_value"] = qr_value
        return Transition(
            pass_id=self.pass_id,
            expected_status=self.status,
            new_status=GatePassStatus.APPROVED if approve else GatePassStatus.REJECTED,
            values=values,
        )


@dataclass(frozen=True)
class ApprovedNotExited(PassState):
    from_date: Optional[datetime] = None
    to_date: Optional[datetime] = None
    status: GatePassStatus = field(init=False, default=GatePassStatus.APPROVED)
    allowed_actions: FrozenSet[str] = field(init=False, default=frozenset({"record_exit"}))

    def record_exit(self, at, marked_by=None):
        if self.to_date is not None and at > self.to_date:
            raise InvalidStateError(
                "Gate pass has expired",
                pass_id=self.pass_id,
                current_status=self.status.value,
            )
        return Transition(
            pass_id=self.pass_id,
            expected_status=self.status,
            new_status=self.status,
            values={"exit_time": at, "exit_marked_by": marked_by},
            guard=MovementGuard.NOT_EXITED,
            action=GatePassAction.EXIT,
        )


@dataclass(frozen=True)
class ApprovedExited(PassState):
    exit_time: Optional[datetime] = None
    to_date: Optional[datetime] = None
    status: GatePassStatus = field(init=False, default=GatePassStatus.APPROVED)
    allowed_actions: FrozenSet[str] = field(init=False, default=frozenset({"record_entry"}))

    def record_entry(self, at, marked_by=None):
        if self.exit_time is not None and at < self.exit_time:
            raise InvalidStateError(
                "Entry time cannot be earlier than the recorded exit",
                pass_id=self.pass_id,
                current_status=self.status.value,
            )
        return Transition(
            pass_id=self.pass_id,
            expected_status=self.status,
            new_status=GatePassStatus.CLOSED,
            values={
                "entry_time": at,
                "entry_marked_by": marked_by,
                "is_late": self.to_date is not None and at > self.to_date,
            },
            guard=MovementGuard.OUT,
            action=GatePassAction.ENTRY,
        )


@dataclass(frozen=True)
class ClosedOnTime(PassState):
    status: GatePassStatus = field(init=False, default=GatePassStatus.CLOSED)


@dataclass(frozen=True)
class ClosedLate(PassState):
    status: GatePassStatus = field(init=False, default=GatePassStatus.CLOSED)


@dataclass(frozen=True)
class Rejected(PassState):
    status: GatePassStatus = field(init=False, default=GatePassStatus.REJECTED)


def lift(gate_pass: GatePass) -> PassState:
    """Build the variant for a stored gate pass row."""
    status = GatePassStatus(gate_pass.status)
    pass_id = gate_pass.id

    if status == GatePassStatus.PENDING_PARENT:
        return PendingParent(pass_id)
    if status == GatePassStatus.PENDING_WARDEN:
        return PendingWarden(pass_id)
    if status == GatePassStatus.REJECTED:
        return Rejected(pass_id)
    if status == GatePassStatus.CLOSED:
        return ClosedLate(pass_id) if gate_pass.is_late else ClosedOnTime(pass_id)

    to_date = coerce_utc(gate_pass.to_date)
    if gate_pass.exit_time is None:
        return ApprovedNotExited(pass_id, from_date=coerce_utc(gate_pass.from_date), to_date=to_date)
    return ApprovedExited(pass_id, exit_time=coerce_utc(gate_pass.exit_time), to_date=to_date)

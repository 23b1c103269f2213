import pytest

from clinic.domain.appointments.lifecycle import (
    TERMINAL_STATUSES,
    SideEffect,
    parse_status,
    plan_transition,
)
from clinic.exceptions import InvalidStatus, InvalidStatusTransition
from clinic.models import AppointmentStatus as S


class TestParseStatus:
    def test_normalizes_case_and_whitespace(self) -> None:
        assert parse_status(" Approved ") is S.APPROVED

    def test_rejects_unknown(self) -> None:
        with pytest.raises(InvalidStatus, match="expected one of"):
            parse_status("archived")


class TestPlanTransition:
    @pytest.mark.parametrize("target", [S.APPROVED, S.REJECTED])
    def test_approve_and_reject_notify_patient(self, target: S) -> None:
        assert plan_transition(S.PENDING, target) == {SideEffect.NOTIFY_PATIENT}

    @pytest.mark.parametrize("target", [S.COMPLETED, S.CANCELLED])
    def test_complete_and_cancel_are_silent(self, target: S) -> None:
        assert plan_transition(S.PENDING, target) == frozenset()

    def test_approved_can_complete(self) -> None:
        assert plan_transition(S.APPROVED, S.COMPLETED) == frozenset()

    def test_same_status_is_noop(self) -> None:
        assert plan_transition(S.APPROVED, S.APPROVED) == frozenset()

    @pytest.mark.parametrize("current", sorted(TERMINAL_STATUSES))
    def test_terminal_states_cannot_move(self, current: S) -> None:
        with pytest.raises(InvalidStatusTransition):
            plan_transition(current, S.PENDING)

    def test_cannot_return_to_pending(self) -> None:
        with pytest.raises(InvalidStatusTransition, match="from 'approved' to 'pending'"):
            plan_transition(S.APPROVED, S.PENDING)

    def test_terminal_set(self) -> None:
        assert TERMINAL_STATUSES == {S.REJECTED, S.COMPLETED, S.CANCELLED}

import pytest
from eduverify.core import state_machine as sm


def test_every_status_has_a_policy_row():
    assert set(sm.TRANSITIONS) == set(sm.REQUEST_STATUSES)

def test_terminal_statuses_have_no_exits():
    for status in sm.TERMINAL_STATUSES:
        assert sm.TRANSITIONS[status] == set()

@pytest.mark.parametrize("current,target", [
    (sm.DRAFT, sm.PAYMENT_PENDING),
    (sm.PAYMENT_PENDING, sm.IN_PROGRESS),
    (sm.PAYMENT_PENDING, sm.PAYMENT_SUCCESS),
    (sm.PAYMENT_SUCCESS, sm.IN_PROGRESS),
    (sm.IN_PROGRESS, sm.VERIFIED),
    (sm.IN_PROGRESS, sm.REJECTED),
    (sm.VERIFIED, sm.VERIFIED),
])
def test_allowed_moves(current, target):
    assert sm.is_allowed(current, target) is True

@pytest.mark.parametrize("current,target", [
    (sm.VERIFIED, sm.DRAFT),
    (sm.REJECTED, sm.IN_PROGRESS),
    (sm.PAYMENT_PENDING, sm.VERIFIED),
    (sm.IN_PROGRESS, sm.PAYMENT_PENDING),
])
def test_blocked_moves(current, target):
    assert sm.is_allowed(current, target) is False

def test_unknown_current_status_allows_nothing_else():
    assert sm.is_allowed("ARCHIVED", sm.VERIFIED) is False

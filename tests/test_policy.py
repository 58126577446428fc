import pytest

from casetranslate.errors import AbortRequested, ErrorCategory, NonInteractiveAbort
from casetranslate.policy import ErrorPolicy


def quiet_policy(**options):
    messages = []
    policy = ErrorPolicy(notify=messages.append, **options)
    return policy, messages


def test_errors_below_threshold_continue():
    policy, messages = quiet_policy(interactive=False)
    policy.handle_error(ErrorCategory.GATEWAY, "first")
    policy.handle_error(ErrorCategory.GATEWAY, "second")
    assert messages == ["first", "second"]
    assert [record.message for record in policy.records] == ["first", "second"]


def test_success_resets_consecutive_count():
    policy, _ = quiet_policy(interactive=False)
    for _ in range(4):
        policy.handle_error(ErrorCategory.GATEWAY, "failure")
        policy.handle_error(ErrorCategory.GATEWAY, "failure")
        policy.record_success()
    assert policy.tracker.total == 8
    assert policy.tracker.consecutive == 0


def test_stop_on_error_raises_immediately():
    policy, messages = quiet_policy(interactive=True, stop_on_error=True)
    with pytest.raises(NonInteractiveAbort):
        policy.handle_error(ErrorCategory.GATEWAY, "quota exceeded")
    assert messages == ["quota exceeded"]


def test_threshold_in_non_interactive_mode_stops_batch():
    policy, _ = quiet_policy(interactive=False)
    policy.handle_error(ErrorCategory.GATEWAY, "one")
    policy.handle_error(ErrorCategory.GATEWAY, "two")
    with pytest.raises(NonInteractiveAbort):
        policy.handle_error(ErrorCategory.GATEWAY, "three")


def test_interactive_operator_can_continue_or_abort():
    answers = iter(["maybe", "c", "abort"])
    policy, messages = quiet_policy(interactive=True, prompt=lambda question: next(answers))

    for _ in range(2):
        policy.handle_error(ErrorCategory.GATEWAY, "failure")
    policy.handle_error(ErrorCategory.GATEWAY, "failure")
    assert "Please respond with Continue or Abort (c/a)." in messages

    for _ in range(2):
        policy.handle_error(ErrorCategory.GATEWAY, "failure")
    with pytest.raises(AbortRequested):
        policy.handle_error(ErrorCategory.GATEWAY, "failure")

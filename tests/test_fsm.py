"""Tests for gitdesk.workflow.fsm module."""

import pytest
from transitions import MachineError

from gitdesk.git.models import (
    CredentialKind,
    CredentialRequest,
    ErrorType,
    InvocationState,
    OperationResult,
    SshHostVerification,
)
from gitdesk.workflow.fsm import (
    InvocationFSM,
    STATES,
    TERMINAL_STATES,
    TRANSITIONS,
    TRIGGER_FOR,
)


class TestFSMStates:
    """Tests for FSM state definitions."""

    def test_all_states_defined(self):
        """Every InvocationState is a machine state."""
        assert set(STATES) == {state.value for state in InvocationState}

    def test_terminal_states_have_no_outgoing_transitions(self):
        sources = {t["source"] for t in TRANSITIONS}
        assert not sources & set(TERMINAL_STATES)

    def test_every_terminal_state_reachable_from_running(self):
        assert set(TRIGGER_FOR) == set(TERMINAL_STATES)


class TestFSMBasic:
    """Basic FSM functionality tests."""

    def test_initial_state_is_start(self):
        fsm = InvocationFSM("fetch")
        assert fsm.state == "start"
        assert not fsm.is_terminal

    def test_launch_moves_to_running(self):
        fsm = InvocationFSM("fetch")
        fsm.launch()
        assert fsm.state == "running"

    def test_cannot_finish_before_launch(self):
        fsm = InvocationFSM("fetch")
        with pytest.raises(MachineError):
            fsm.succeed()

    def test_launch_failed_from_start(self):
        fsm = InvocationFSM("fetch")
        fsm.launch_failed()
        assert fsm.state == "failed"

    def test_launch_failed_from_running(self):
        fsm = InvocationFSM("fetch")
        fsm.launch()
        fsm.launch_failed()
        assert fsm.state == "failed"

    def test_no_retry_from_terminal_state(self):
        """A terminal state has no way back; the caller starts a new machine."""
        fsm = InvocationFSM("pull")
        fsm.launch()
        fsm.fail()
        assert fsm.is_terminal
        assert not fsm.can("launch")
        with pytest.raises(MachineError):
            fsm.launch()

    def test_can(self):
        fsm = InvocationFSM("pull")
        assert fsm.can("launch")
        assert not fsm.can("succeed")


class TestFinish:
    """finish() picks the trigger matching the classified result."""

    @pytest.mark.parametrize("result,state", [
        (OperationResult.ok("done"), InvocationState.SUCCEEDED),
        (OperationResult(False, "x", ssh_verification=SshHostVerification("h", "ED25519", "SHA256:a")),
         InvocationState.SSH_VERIFICATION_REQUIRED),
        (OperationResult(False, "x", credential_request=CredentialRequest(CredentialKind.PASSWORD, "p")),
         InvocationState.CREDENTIAL_REQUIRED),
        (OperationResult.failed("x", ErrorType.MERGE_CONFLICT, ["a.txt"]), InvocationState.CONFLICTED),
        (OperationResult.failed("x", ErrorType.CONNECTION_REFUSED), InvocationState.FAILED),
    ])
    def test_reaches_result_state(self, result, state):
        fsm = InvocationFSM("op")
        fsm.launch()
        assert fsm.finish(result) is state
        assert fsm.state == state.value
        assert fsm.is_terminal


class TestFSMCallbacks:
    """Tests for FSM transition callbacks."""

    def test_on_transition_callback(self):
        """on_transition callback should be called after each transition."""
        transitions = []

        def callback(from_state, to_state, trigger):
            transitions.append((from_state, to_state, trigger))

        fsm = InvocationFSM("push", on_transition=callback)
        fsm.launch()
        fsm.finish(OperationResult.ok("Everything up-to-date"))

        assert transitions == [
            ("start", "running", "launch"),
            ("running", "succeeded", "succeed"),
        ]

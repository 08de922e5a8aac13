"""Invocation state machine using transitions library.

Every classified git invocation walks the same lifecycle:

    start --launch--> running --<outcome>--> one terminal state

Terminal states have no outgoing transitions; there is no automatic retry.
The caller resolves whatever blocked the command (accepts a host key,
supplies a credential, resolves conflicts) and issues the command again,
which starts a fresh machine.

Usage:
    from gitdesk.workflow.fsm import InvocationFSM

    fsm = InvocationFSM("pull")
    fsm.launch()
    fsm.finish(result)  # picks the trigger matching result.state
"""

import logging
from typing import Callable

from transitions import Machine

from gitdesk.git.models import InvocationState, OperationResult

logger = logging.getLogger(__name__)


STATES = [state.value for state in InvocationState]

TERMINAL_STATES = [
    InvocationState.SUCCEEDED.value,
    InvocationState.SSH_VERIFICATION_REQUIRED.value,
    InvocationState.CREDENTIAL_REQUIRED.value,
    InvocationState.CONFLICTED.value,
    InvocationState.FAILED.value,
]

# Transitions defined as (trigger, source, dest)
# Each trigger becomes a method on the FSM
TRANSITIONS = [
    {"trigger": "launch", "source": "start", "dest": "running"},

    # Outcomes
    {"trigger": "succeed", "source": "running", "dest": "succeeded"},
    {"trigger": "require_ssh_verification", "source": "running", "dest": "ssh_verification_required"},
    {"trigger": "require_credential", "source": "running", "dest": "credential_required"},
    {"trigger": "conflict", "source": "running", "dest": "conflicted"},
    {"trigger": "fail", "source": "running", "dest": "failed"},

    # Process never started (missing executable, permission denied)
    {"trigger": "launch_failed", "source": "start", "dest": "failed"},
    {"trigger": "launch_failed", "source": "running", "dest": "failed"},
]

# Terminal state -> trigger that reaches it from running
TRIGGER_FOR = {
    t["dest"]: t["trigger"] for t in TRANSITIONS if t["source"] == "running" and t["trigger"] != "launch_failed"
}


class InvocationFSM:
    """State machine for one git invocation.

    Wraps the transitions library with invocation-specific logic:
    - Maps a classified OperationResult to its outcome trigger
    - Logs all transitions
    """

    def __init__(self, label: str, on_transition: Callable[[str, str, str], None] | None = None):
        """Initialize FSM for one invocation.

        Args:
            label: Short description for log lines (e.g., "pull")
            on_transition: Optional callback(from_state, to_state, trigger) called after transitions
        """
        self.label = label
        self.on_transition = on_transition

        self.machine = Machine(
            model=self,
            states=STATES,
            transitions=TRANSITIONS,
            initial=InvocationState.START.value,
            auto_transitions=False,  # Only explicit transitions
            send_event=True,  # Pass EventData to callbacks
            after_state_change="on_state_change",  # Callback after any transition
        )

    def on_state_change(self, event) -> None:
        """Callback after any state transition."""
        from_state = event.transition.source
        to_state = event.transition.dest
        trigger = event.event.name

        logger.debug(f"[FSM] {self.label}: {from_state} -> {to_state} ({trigger})")

        if self.on_transition:
            self.on_transition(from_state, to_state, trigger)

    @property
    def is_terminal(self) -> bool:
        return self.state in TERMINAL_STATES

    def finish(self, result: OperationResult) -> InvocationState:
        """Move from running to the terminal state the result represents."""
        target = result.state
        self.trigger(TRIGGER_FOR[target.value])
        return target

    def can(self, trigger: str) -> bool:
        """Check if a trigger can be executed in current state."""
        return trigger in self.machine.get_triggers(self.state)

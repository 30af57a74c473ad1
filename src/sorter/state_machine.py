"""State machine for a single sort job."""

from enum import Enum

import structlog

from src.sorter.constants import COMPONENT_PIPELINE


logger = structlog.get_logger()


class JobState(str, Enum):
    """State of a sort job.

    - PENDING: Created, no lookup issued yet
    - FETCHING: Looking up playcounts
    - RANKED: All lookups done, ranking assembled
    - DONE: Ranking handed back to the caller
    - ABORTED: Cancellation observed, no ranking produced
    """

    PENDING = "PENDING"
    FETCHING = "FETCHING"
    RANKED = "RANKED"
    DONE = "DONE"
    ABORTED = "ABORTED"


_VALID_TRANSITIONS: dict[JobState, set[JobState]] = {
    JobState.PENDING: {JobState.FETCHING, JobState.ABORTED},
    JobState.FETCHING: {JobState.RANKED, JobState.ABORTED},
    JobState.RANKED: {JobState.DONE},
    JobState.DONE: set(),  # Terminal state
    JobState.ABORTED: set(),  # Terminal state
}


class JobStateTransitionError(Exception):
    """Raised when an illegal state transition is attempted."""

    def __init__(
        self,
        run_id: str,
        from_state: JobState,
        to_state: JobState,
    ) -> None:
        """Initialize the transition error.

        Args:
            run_id: Identifier of the job.
            from_state: Current state.
            to_state: Attempted target state.
        """
        self.run_id = run_id
        self.from_state = from_state
        self.to_state = to_state
        super().__init__(
            f"Illegal state transition for job '{run_id}': "
            f"{from_state.value} -> {to_state.value}"
        )


class JobStateMachine:
    """Manages state transitions for a sort job.

    Enforces valid transitions and logs all state changes.
    """

    def __init__(self, run_id: str) -> None:
        """Initialize the state machine.

        Args:
            run_id: Identifier for the job.
        """
        self._run_id = run_id
        self._state = JobState.PENDING
        self._log = logger.bind(component=COMPONENT_PIPELINE, run_id=run_id)

    @property
    def run_id(self) -> str:
        """Get the job identifier."""
        return self._run_id

    @property
    def state(self) -> JobState:
        """Get the current state."""
        return self._state

    @property
    def is_terminal(self) -> bool:
        """Check if current state is terminal."""
        return self._state in (JobState.DONE, JobState.ABORTED)

    def can_transition_to(self, target: JobState) -> bool:
        """Check if a transition to the target state is valid.

        Args:
            target: The target state.

        Returns:
            True if the transition is valid.
        """
        return target in _VALID_TRANSITIONS.get(self._state, set())

    def transition_to(self, target: JobState) -> None:
        """Transition to a new state.

        Args:
            target: The target state.

        Raises:
            JobStateTransitionError: If the transition is invalid.
        """
        if not self.can_transition_to(target):
            self._log.error(
                "illegal_state_transition",
                from_state=self._state.value,
                to_state=target.value,
            )
            raise JobStateTransitionError(self._run_id, self._state, target)

        old_state = self._state
        self._state = target
        self._log.debug(
            "state_transition",
            from_state=old_state.value,
            to_state=target.value,
        )

    def to_fetching(self) -> None:
        """Transition to FETCHING state."""
        self.transition_to(JobState.FETCHING)

    def to_ranked(self) -> None:
        """Transition to RANKED state."""
        self.transition_to(JobState.RANKED)

    def to_done(self) -> None:
        """Transition to DONE state."""
        self.transition_to(JobState.DONE)

    def to_aborted(self) -> None:
        """Transition to ABORTED state."""
        self.transition_to(JobState.ABORTED)

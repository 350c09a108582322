"""Exception hierarchy for the debate coordinator."""


class CoordinatorError(Exception):
    """Base class for all coordinator errors."""


class RoomNotFound(CoordinatorError):
    """Raised when an operation references a debate that has no chat room."""

    def __init__(self, debate_id: int):
        self.debate_id = debate_id
        super().__init__(f"No chat room exists for debate {debate_id}")


class DeliveryFailed(CoordinatorError):
    """Raised when a remote agent is unreachable or answers with an error."""

    def __init__(self, participant_id: str, cause: Exception | str):
        self.participant_id = participant_id
        self.cause = cause
        super().__init__(f"Delivery to agent {participant_id} failed: {cause}")


class ReplyShapeInvalid(DeliveryFailed):
    """Raised when an agent reply does not match any known reply schema."""


class StoreUnavailable(CoordinatorError):
    """Raised when the persistence backend fails."""


class VerdictFormatUnparsable(CoordinatorError):
    """Raised when the judge never restates the winner in the required format."""

    def __init__(self, attempts: int, last_reply: str):
        self.attempts = attempts
        self.last_reply = last_reply
        super().__init__(
            f"Judge reply could not be parsed after {attempts} attempts: {last_reply[:80]!r}"
        )


class LedgerReadFailed(CoordinatorError):
    """Raised when the ledger cannot be read or a lifecycle action is rejected."""

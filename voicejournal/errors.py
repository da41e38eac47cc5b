"""Error taxonomy for voicejournal."""


class JournalError(Exception):
    """Base class for voicejournal errors."""

    reason = "error"

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class ValidationError(JournalError):
    """Raised for malformed input before any state is touched."""

    reason = "invalid"


class NotFoundError(JournalError):
    """Raised when a referenced user, week or entry does not exist."""

    reason = "not_found"


class StateConflictError(JournalError):
    """Raised when a week is processed outside the recording state."""


class AlreadyCompleteError(StateConflictError):
    reason = "already_complete"


class AlreadyProcessingError(StateConflictError):
    reason = "already_processing"


class InErrorStateError(StateConflictError):
    reason = "in_error_state"


class CollaboratorError(JournalError):
    """Raised when an external service call fails."""

    reason = "collaborator_failed"


class TranscriptionError(CollaboratorError):
    reason = "transcription_failed"


class SummarizationError(CollaboratorError):
    reason = "summarization_failed"

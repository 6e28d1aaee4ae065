"""
Exceptions raised by the review pipeline.

Each error that reaches the API carries the HTTP status it maps to and a
message that is safe to show to the caller.
"""


class PitchReviewError(Exception):
    """Base class for pipeline errors"""
    status_code = 500
    public_message = "Internal server error"

    def __init__(self, message: str = "", public_message: str = ""):
        self.public_message = public_message or type(self).public_message
        super().__init__(message or self.public_message)


class MissingPitchIdError(PitchReviewError):
    status_code = 400
    public_message = "pitchId is required"


class PitchNotFoundError(PitchReviewError):
    status_code = 404
    public_message = "Pitch not found"

    def __init__(self, pitch_id: str, public_message: str = ""):
        super().__init__(f"Pitch not found: {pitch_id}", public_message)
        self.pitch_id = pitch_id


class UnauthorizedError(PitchReviewError):
    status_code = 401
    public_message = "Unauthorized"


class InvalidNotificationError(PitchReviewError):
    status_code = 400
    public_message = "Invalid status"


class AnalysisFailedError(PitchReviewError):
    status_code = 500
    public_message = "Failed to analyze pitch"


class LLMError(Exception):
    """The language model call failed or returned something unusable"""


class NotificationError(Exception):
    """A notification could not be delivered"""

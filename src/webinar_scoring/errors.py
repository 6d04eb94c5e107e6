"""Error kinds raised by the scoring services"""


class ScoringError(Exception):
    """Base class for engagement and lead-scoring errors"""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(ScoringError):
    """Unknown session, registration or webinar id"""

    status_code = 404


class InvalidInputError(ScoringError):
    """Malformed input such as a bad milestone value or negative progress"""

    status_code = 400


class UnavailableError(ScoringError):
    """Underlying storage failed"""

    status_code = 503

class SRSError(Exception):
    """Base class for review engine errors"""


class InvalidReviewInput(SRSError, ValueError):
    """Caller supplied a value outside the engine's documented domain"""


class NotFoundError(SRSError):
    """A referenced user, course or lesson does not exist"""


class ConcurrentUpdateError(SRSError):
    """
    Another writer changed the same (user, lesson) review record first.

    Nothing from the losing update was persisted; the caller may retry.
    """

    retryable = True

    def __init__(self, user_id, lesson_id, message: str = None):
        self.user_id = user_id
        self.lesson_id = lesson_id
        super().__init__(
            message or f"Concurrent update of review for user {user_id}, lesson {lesson_id}"
        )

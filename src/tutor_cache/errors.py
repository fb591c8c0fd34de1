"""Exception hierarchy for the cache and generation layers."""


class TutorCacheError(Exception):
    """Base class for all tutor_cache errors."""


class CacheStoreError(TutorCacheError):
    """Cache backend read/write failure.

    Never reaches an external caller: the service layer treats it as a
    cache miss or a dropped write.
    """


class AnswerStoreError(TutorCacheError):
    """Answer record backend read/write failure."""


class GenerationError(TutorCacheError):
    """The generation service failed or returned an unusable result."""


class ContentGenerationError(TutorCacheError):
    """Generation failure surfaced to the caller of a family without a fallback.

    Attributes:
        family: Content family that failed ("content", "recommendation")
        cause: The underlying exception
    """

    def __init__(self, family: str, message: str, cause: Exception | None = None) -> None:
        super().__init__(message)
        self.family = family
        self.cause = cause


class CleanupError(TutorCacheError):
    """Manual cache cleanup could not complete."""

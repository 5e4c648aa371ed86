"""Error taxonomy for the scoring pipeline."""


class SessionQualityError(Exception):
    """Base class for every error raised by this package."""


class ValidationError(SessionQualityError):
    """Caller input was rejected before any retrieval happened."""


class RetrievalError(SessionQualityError):
    """The session store could not be reached or queried."""


class PerSessionError(SessionQualityError):
    """A single session could not be scored.

    The pipeline records these on the session's result and moves on; they
    never escape ``SessionPipeline.run``.
    """


class MissingSessionIdError(PerSessionError):
    """The session record carries none of the accepted identifier fields."""


class AnalysisServiceError(PerSessionError):
    """The analysis service call failed or returned an unusable response."""

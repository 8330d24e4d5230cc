"""Exception hierarchy for the factor prediction engine."""


class PredictorError(Exception):
    """Base exception for all prediction engine errors."""


class InsufficientDataError(PredictorError):
    """Not enough bars to derive a value; absorbed internally as undefined."""


class InvalidConfigurationError(PredictorError):
    """Scoring configuration rejected at construction time."""


class InvalidParameterError(PredictorError):
    """Call parameters outside their accepted range."""

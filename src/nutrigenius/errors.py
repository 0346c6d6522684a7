"""Error taxonomy for the NutriGenius core."""


class NutriGeniusError(Exception):
    """Base class for domain errors."""


class ValidationError(NutriGeniusError):
    """Profile input is malformed or out of range."""


class GenerationError(NutriGeniusError):
    """The generative model could not produce a response."""


class MalformedPlanError(NutriGeniusError):
    """Model output failed structural validation as a daily plan."""

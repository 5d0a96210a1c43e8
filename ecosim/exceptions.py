"""EcoSim exception hierarchy.

Failures inside a tick are absorbed locally; these classes cover the
boundary cases that callers are expected to handle.
"""


class EcoSimError(Exception):
    """Root of all EcoSim exceptions."""


class ConfigurationError(EcoSimError):
    """Invalid or inconsistent configuration."""


class UnknownKindError(EcoSimError, ValueError):
    """A spawn or query named a kind that does not exist."""

"""Exceptions raised by the DepGuard core."""


class DepGuardError(Exception):
    """Base class for DepGuard errors."""


class ProbeError(DepGuardError):
    """A package manager command could not be run to completion."""


class ManifestError(DepGuardError):
    """A manifest file could not be read or parsed."""


class LLMProviderError(DepGuardError):
    """A language model call failed or returned an unusable response."""

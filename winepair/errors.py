"""
Error taxonomy for the pairing engine.

Only configuration and input problems reach the caller. Provider and model
failures are absorbed by the components that own them and show up as
``ai_enhanced=False`` or a lower ``confidence`` instead.
"""
from __future__ import annotations


class PairingError(Exception):
    """Base class. ``code`` and ``status_code`` let the HTTP layer map errors."""

    code: str = "pairing_error"
    status_code: int = 500

    def __init__(self, message: str = "") -> None:
        super().__init__(message or self.__class__.__name__)
        self.message = message or self.__class__.__name__


class ValidationError(PairingError):
    code = "validation_error"
    status_code = 422


class NoCandidatesError(PairingError):
    code = "no_candidates"
    status_code = 200


class ConfigurationError(PairingError):
    """Fatal: the rule scorer or the pipeline cannot run with this config."""

    code = "configuration_error"
    status_code = 500


class ModelUnavailable(PairingError):
    code = "model_unavailable"
    status_code = 503


class ProviderError(PairingError):
    code = "provider_error"
    status_code = 502

    def __init__(self, provider: str, message: str = "") -> None:
        super().__init__(f"{provider}: {message}" if message else provider)
        self.provider = provider


class ProviderTimeout(ProviderError):
    code = "provider_timeout"
    status_code = 504

"""
Client Module

This module provides the Langbly translation API client and its error types.
"""

from langbly_sync.exceptions import (
    TranslationError,
    ServiceError,
    TransientServiceError,
    PermanentServiceError,
    RetriesExhaustedError,
    ResponseFormatError,
)
from langbly_sync.client.service import Translation, TranslationClient, validate_client_config

__all__ = [
    'TranslationError',
    'ServiceError',
    'TransientServiceError',
    'PermanentServiceError',
    'RetriesExhaustedError',
    'ResponseFormatError',
    'Translation',
    'TranslationClient',
    'validate_client_config',
]

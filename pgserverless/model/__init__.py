"""
Model package for pgserverless.

Contains the configuration, credential and process models.
"""

from .config import (
    ConnConfig,
    ConnConfigParams,
    merge_and_validate,
    new_default_config,
)
from .credential import ConnCredential, parse_url
from .idle_process import IdleProcess
from .state import ConnState

__all__ = [
    # Configuration
    "ConnConfig",
    "ConnConfigParams",
    "merge_and_validate",
    "new_default_config",
    # Credential
    "ConnCredential",
    "parse_url",
    # Processes
    "IdleProcess",
    # State
    "ConnState",
]

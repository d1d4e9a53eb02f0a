"""
Runtime Configuration Module

Provides configuration loading and management for the airdrop toolkit.
"""

from .runtime import (
    CacheConfig,
    LoggingConfig,
    MerkleConfig,
    RuntimeConfig,
    get_default_config_template,
)

__all__ = [
    "RuntimeConfig",
    "MerkleConfig",
    "CacheConfig",
    "LoggingConfig",
    "get_default_config_template",
]

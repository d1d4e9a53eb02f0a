"""
Runtime Configuration

Central configuration for tree hashing, leaf encoding, caching and logging.
"""

from __future__ import annotations

import copy
import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

from dotenv import load_dotenv

from core.allocation.models import LeafEncoding
from core.crypto.hashing import HashAlgorithm, TreeHasher
from core.merkle.cache import DEFAULT_MAX_ENTRIES, TreeCache

load_dotenv()


ENV_PREFIX = "AIRDROP_"

DEFAULT_CONFIG_PATHS = (
    Path("airdrop.yaml"),
    Path("airdrop.yml"),
    Path("airdrop.json"),
    Path.home() / ".config" / "airdrop" / "config.yaml",
)


def _env_bool(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")


@dataclass
class MerkleConfig:
    """How leaves and nodes are hashed and records encoded."""
    hash_algorithm: str = HashAlgorithm.SHA256.value
    leaf_encoding: str = LeafEncoding.TEXT.value
    # Off by default: must match the verifier already deployed on-chain
    domain_separation: bool = False

    def __post_init__(self):
        # Reject unknown names at load time
        self.hash_algorithm = HashAlgorithm(self.hash_algorithm).value
        self.leaf_encoding = LeafEncoding(self.leaf_encoding).value


@dataclass
class CacheConfig:
    """Configuration for the campaign tree cache."""
    max_campaigns: int = DEFAULT_MAX_ENTRIES


@dataclass
class LoggingConfig:
    """Configuration for log output."""
    level: str = "INFO"
    file: Optional[str] = None


@dataclass
class RuntimeConfig:
    """
    Complete runtime configuration.

    Can be loaded from:
    - Environment variables (AIRDROP_* prefix, .env supported)
    - YAML or JSON file
    - Programmatic construction
    """
    merkle: MerkleConfig = field(default_factory=MerkleConfig)
    cache: CacheConfig = field(default_factory=CacheConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    extra: dict[str, Any] = field(default_factory=dict)

    @staticmethod
    def _get_env_overrides() -> dict[str, Any]:
        """
        Get configuration overrides from environment variables.

        Supported variables:
        - AIRDROP_HASH_ALGORITHM: sha256 or keccak256
        - AIRDROP_LEAF_ENCODING: text or packed
        - AIRDROP_DOMAIN_SEPARATION: prefix leaves/nodes (true/false)
        - AIRDROP_CACHE_MAX_CAMPAIGNS: tree cache size
        - AIRDROP_LOG_LEVEL: log level
        - AIRDROP_LOG_FILE: log file path
        """
        overrides: dict[str, Any] = {}

        if os.getenv(f"{ENV_PREFIX}HASH_ALGORITHM"):
            overrides.setdefault("merkle", {})["hash_algorithm"] = os.getenv(f"{ENV_PREFIX}HASH_ALGORITHM")
        if os.getenv(f"{ENV_PREFIX}LEAF_ENCODING"):
            overrides.setdefault("merkle", {})["leaf_encoding"] = os.getenv(f"{ENV_PREFIX}LEAF_ENCODING")
        if os.getenv(f"{ENV_PREFIX}DOMAIN_SEPARATION"):
            overrides.setdefault("merkle", {})["domain_separation"] = _env_bool(
                os.getenv(f"{ENV_PREFIX}DOMAIN_SEPARATION", "false")
            )

        if os.getenv(f"{ENV_PREFIX}CACHE_MAX_CAMPAIGNS"):
            overrides.setdefault("cache", {})["max_campaigns"] = int(
                os.getenv(f"{ENV_PREFIX}CACHE_MAX_CAMPAIGNS", str(DEFAULT_MAX_ENTRIES))
            )

        if os.getenv(f"{ENV_PREFIX}LOG_LEVEL"):
            overrides.setdefault("logging", {})["level"] = os.getenv(f"{ENV_PREFIX}LOG_LEVEL")
        if os.getenv(f"{ENV_PREFIX}LOG_FILE"):
            overrides.setdefault("logging", {})["file"] = os.getenv(f"{ENV_PREFIX}LOG_FILE")

        return overrides

    @classmethod
    def from_env(cls) -> "RuntimeConfig":
        """Load configuration purely from environment variables."""
        return cls.from_dict(cls._get_env_overrides())

    @classmethod
    def from_yaml(cls, path: str | Path) -> "RuntimeConfig":
        """Load configuration from a YAML file."""
        import yaml
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")

        with open(path) as f:
            data = yaml.safe_load(f)

        return cls.from_dict(data or {})

    @classmethod
    def from_json(cls, path: str | Path) -> "RuntimeConfig":
        """Load configuration from a JSON file."""
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")

        with open(path) as f:
            data = json.load(f)

        return cls.from_dict(data)

    @classmethod
    def from_file(cls, path: str | Path) -> "RuntimeConfig":
        """Load a YAML or JSON config file by suffix."""
        path = Path(path)
        if path.suffix.lower() == ".json":
            return cls.from_json(path)
        return cls.from_yaml(path)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RuntimeConfig":
        """Load configuration from a dictionary (supports partial data)."""
        merkle_data = data.get("merkle", {}) or {}
        cache_data = data.get("cache", {}) or {}
        logging_data = data.get("logging", {}) or {}

        return cls(
            merkle=MerkleConfig(**merkle_data),
            cache=CacheConfig(**cache_data),
            logging=LoggingConfig(**logging_data),
            extra=data.get("extra", {}) or {},
        )

    @classmethod
    def load(cls, path: str | Path | None = None) -> "RuntimeConfig":
        """
        Load from ``path`` or the first default location found, then
        overlay environment variables.

        Search order without ``path``:
          1. ./airdrop.yaml, ./airdrop.yml, ./airdrop.json
          2. ~/.config/airdrop/config.yaml
        """
        if path is not None:
            config = cls.from_file(path)
        else:
            config = cls()
            for candidate in DEFAULT_CONFIG_PATHS:
                if candidate.exists():
                    config = cls.from_file(candidate)
                    break
        return config.with_env_overrides()

    def with_env_overrides(self) -> "RuntimeConfig":
        """
        Return a new config with environment variable overrides applied.

        This allows loading from a config file first, then overlaying env vars.
        """
        overrides = self._get_env_overrides()
        if not overrides:
            return self

        new_config = copy.deepcopy(self)
        for section in ("merkle", "cache", "logging"):
            for key, value in overrides.get(section, {}).items():
                setattr(getattr(new_config, section), key, value)

        # Re-validate enum-valued settings
        new_config.merkle = MerkleConfig(**vars(new_config.merkle))
        return new_config

    def tree_hasher(self) -> TreeHasher:
        """TreeHasher for the configured algorithm and domain separation."""
        return TreeHasher(
            algorithm=HashAlgorithm(self.merkle.hash_algorithm),
            domain_separated=self.merkle.domain_separation,
        )

    def leaf_encoding(self) -> LeafEncoding:
        return LeafEncoding(self.merkle.leaf_encoding)

    def tree_cache(self) -> TreeCache:
        """A new, empty TreeCache sized from config."""
        return TreeCache(max_entries=self.cache.max_campaigns)

    def to_dict(self) -> dict[str, Any]:
        """Convert configuration to a dictionary."""
        return {
            "merkle": {
                "hash_algorithm": self.merkle.hash_algorithm,
                "leaf_encoding": self.merkle.leaf_encoding,
                "domain_separation": self.merkle.domain_separation,
            },
            "cache": {
                "max_campaigns": self.cache.max_campaigns,
            },
            "logging": {
                "level": self.logging.level,
                "file": self.logging.file,
            },
            "extra": self.extra,
        }


def get_default_config_template() -> str:
    """Get a template YAML configuration file."""
    return """\
merkle:
  # sha256 or keccak256
  hash_algorithm: sha256
  # text ("recipient:amount") or packed (abi.encodePacked(address, uint256))
  leaf_encoding: text
  # Prefix leaves with 0x00 and nodes with 0x01. Only enable when the
  # on-chain verifier hashes the same way.
  domain_separation: false

cache:
  max_campaigns: 128

logging:
  level: INFO
  file: null
"""

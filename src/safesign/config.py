"""
Configuration Management for Safesign
=====================================

Dataclass configuration for building signers, with validation at construction
time so a bad digest name or separator fails at startup rather than on the
first signed token.
"""

import logging
import os
from dataclasses import dataclass, field
from typing import List, Mapping, Optional, Union

from .algorithm import create_algorithm, resolve_digest
from .key_derivation import DEFAULT_KEY_DERIVATION, KeyMaterial, get_key_derivation
from .multi import MultiSerializer, MultiSigner
from .separator import DEFAULT_SEPARATOR, Separator
from .serializer import Encoding, Serializer, TimedSerializer
from .signer import DEFAULT_SALT, Signer, SignerBuilder
from .timed import TimestampSigner

logger = logging.getLogger(__name__)

ENV_PREFIX = "SAFESIGN_"


@dataclass
class SignerConfig:
    """Configuration for a signer and, optionally, its rotation fallbacks."""

    secret_key: KeyMaterial
    salt: KeyMaterial = DEFAULT_SALT
    separator: str = DEFAULT_SEPARATOR
    digest_method: str = "sha1"
    key_derivation: str = DEFAULT_KEY_DERIVATION
    algorithm: str = "hmac"  # "hmac", "none"
    fallback_secret_keys: List[KeyMaterial] = field(default_factory=list)

    def __post_init__(self):
        """Validate signer configuration."""
        if not self.secret_key:
            raise ValueError("secret_key must not be empty")

        # Each of these raises on invalid input
        Separator(self.separator)
        resolve_digest(self.digest_method)
        get_key_derivation(self.key_derivation)
        create_algorithm(self.algorithm, self.digest_method)

        if any(not key for key in self.fallback_secret_keys):
            raise ValueError("fallback_secret_keys must not contain empty keys")

        if self.algorithm == "none":
            logger.warning("Signing algorithm 'none' configured: signatures are empty")

        logger.debug(
            f"Signer configured: digest={self.digest_method}, "
            f"key_derivation={self.key_derivation}, algorithm={self.algorithm}, "
            f"separator={self.separator!r}, fallbacks={len(self.fallback_secret_keys)}"
        )

    @classmethod
    def from_env(
        cls, prefix: str = ENV_PREFIX, environ: Optional[Mapping[str, str]] = None
    ) -> "SignerConfig":
        """
        Load configuration from environment variables.

        Reads ``<prefix>SECRET_KEY`` (required), ``SALT``, ``SEPARATOR``,
        ``DIGEST_METHOD``, ``KEY_DERIVATION``, ``ALGORITHM`` and the
        comma-separated ``FALLBACK_SECRET_KEYS``.
        """
        env = os.environ if environ is None else environ

        secret_key = env.get(f"{prefix}SECRET_KEY")
        if not secret_key:
            raise ValueError(f"{prefix}SECRET_KEY is not set")

        kwargs = {}
        for name in ("salt", "separator", "digest_method", "key_derivation", "algorithm"):
            value = env.get(f"{prefix}{name.upper()}")
            if value:
                kwargs[name] = value

        fallbacks = env.get(f"{prefix}FALLBACK_SECRET_KEYS", "")
        kwargs["fallback_secret_keys"] = [key.strip() for key in fallbacks.split(",") if key.strip()]

        return cls(secret_key=secret_key, **kwargs)

    def builder(self, secret_key: Optional[KeyMaterial] = None) -> SignerBuilder:
        """Builder for the primary key, or for ``secret_key`` when given."""
        return (
            SignerBuilder(self.secret_key if secret_key is None else secret_key)
            .with_salt(self.salt)
            .with_separator(self.separator)
            .with_digest_method(self.digest_method)
            .with_key_derivation(self.key_derivation)
            .with_algorithm(self.algorithm)
        )


def create_signer_config(secret_key: KeyMaterial, **overrides) -> SignerConfig:
    """
    Factory function for creating configurations with convenience parameters.

    Args:
        secret_key: Primary secret key
        **overrides: Values for any SignerConfig field

    Returns:
        Configured SignerConfig instance
    """
    known = set(SignerConfig.__dataclass_fields__)
    kwargs = {}
    for key, value in overrides.items():
        if key in known and key != "secret_key":
            kwargs[key] = value
        else:
            logger.warning(f"Unknown configuration parameter ignored: {key}")

    return SignerConfig(secret_key=secret_key, **kwargs)


def create_signer(config: SignerConfig) -> Signer:
    return config.builder().build()


def create_timestamp_signer(config: SignerConfig) -> TimestampSigner:
    return create_signer(config).into_timestamp_signer()


def create_multi_signer(config: SignerConfig) -> MultiSigner:
    """
    Signer for the primary key, accepting tokens from every fallback key.

    Timestamp signers cannot be rotated this way, as fallbacks return the
    bare value and the timestamp needed for expiry checks would be lost.
    """
    multi = MultiSigner(create_signer(config))
    for secret_key in config.fallback_secret_keys:
        multi.add_fallback(config.builder(secret_key).build())
    return multi


def create_serializer(
    config: SignerConfig, encoding: Optional[Encoding] = None, timed: bool = False
) -> Union[Serializer, TimedSerializer, MultiSerializer]:
    """
    Create a serializer from ``config``.

    Returns a MultiSerializer when fallback keys are configured. Timed
    serializers do not support fallbacks.
    """
    if timed:
        if config.fallback_secret_keys:
            raise ValueError("Fallback keys are not supported for timed serializers")
        return TimedSerializer(create_timestamp_signer(config), encoding)

    primary = Serializer(create_signer(config), encoding)
    if not config.fallback_secret_keys:
        return primary

    multi = MultiSerializer(primary)
    for secret_key in config.fallback_secret_keys:
        multi.add_fallback(Serializer(config.builder(secret_key).build(), encoding))
    logger.debug(f"Serializer created with {len(config.fallback_secret_keys)} fallback key(s)")
    return multi

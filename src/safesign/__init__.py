"""
safesign - Sign values for untrusted environments and verify them on return.

Values are signed with an HMAC over a derived key and framed as
``value.signature`` (or ``value.timestamp.signature``), so tokens handed to a
cookie, URL or API client can later be checked for tampering and expiry.
Tokens are wire-compatible with itsdangerous.

Key Features:
- HMAC signing over any fixed-size hashlib digest
- Pluggable key derivation (concat, django-concat, hmac)
- Timestamped signatures with max-age checks
- JSON serializers with optional base64 payload encoding
- Key rotation through fallback signers and serializers

Quick Start:
    >>> from safesign import default_builder
    >>>
    >>> signer = default_builder("secret key").build()
    >>> signed = signer.sign("hello world!")
    >>> signer.unsign(signed)
    'hello world!'
    >>>
    >>> timed = signer.into_timestamp_signer()
    >>> timed.unsign(timed.sign("hello world!")).value_if_not_expired(60)
    'hello world!'
"""

from .algorithm import HMACAlgorithm, NoneAlgorithm, Signature, SigningAlgorithm
from .config import (
    SignerConfig,
    create_multi_signer,
    create_serializer,
    create_signer,
    create_signer_config,
    create_timestamp_signer,
)
from .error_handling import (
    BadSignature,
    BadTimedSignature,
    DecodeError,
    EncodingError,
    InvalidSeparator,
    PayloadError,
    PayloadInvalid,
    SafeSignError,
    SeparatorNotFound,
    SerializationError,
    SignatureMismatch,
    SigningConfigurationError,
    TimestampExpired,
    TimestampInvalid,
    TimestampMissing,
)
from .key_derivation import Concat, DeriveKey, DjangoConcat, Hmac
from .multi import MultiSerializer, MultiSigner
from .separator import Separator
from .serializer import (
    Encoding,
    NullEncoding,
    Serializer,
    TimedSerializer,
    URLSafeEncoding,
    UnverifiedTimedValue,
    UnverifiedValue,
    serializer_with_signer,
    timed_serializer_with_signer,
)
from .signer import DEFAULT_SALT, Signer, SignerBuilder, default_builder
from .timed import TimestampSigner, UnsignedValue

__version__ = "0.1.0"

__all__ = [
    # Signers
    "Signer",
    "SignerBuilder",
    "default_builder",
    "TimestampSigner",
    "UnsignedValue",
    "Separator",
    "DEFAULT_SALT",
    # Algorithms and key derivation
    "SigningAlgorithm",
    "HMACAlgorithm",
    "NoneAlgorithm",
    "Signature",
    "DeriveKey",
    "Concat",
    "DjangoConcat",
    "Hmac",
    # Serializers
    "Encoding",
    "NullEncoding",
    "URLSafeEncoding",
    "Serializer",
    "TimedSerializer",
    "UnverifiedValue",
    "UnverifiedTimedValue",
    "serializer_with_signer",
    "timed_serializer_with_signer",
    # Key rotation
    "MultiSigner",
    "MultiSerializer",
    # Configuration
    "SignerConfig",
    "create_signer_config",
    "create_signer",
    "create_timestamp_signer",
    "create_multi_signer",
    "create_serializer",
    # Errors
    "SafeSignError",
    "InvalidSeparator",
    "SigningConfigurationError",
    "DecodeError",
    "PayloadError",
    "SerializationError",
    "EncodingError",
    "BadSignature",
    "SeparatorNotFound",
    "SignatureMismatch",
    "PayloadInvalid",
    "BadTimedSignature",
    "TimestampMissing",
    "TimestampInvalid",
    "TimestampExpired",
    # Version info
    "__version__",
]

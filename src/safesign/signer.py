"""
Separator-Framed Signer
=======================

Signs strings as ``<value><sep><base64(signature)>`` and verifies them back.

A salt can be used to namespace the signature, so that a signed string is only
valid for a given namespace. Leaving this at the default value, or re-using a
salt across parts of an application where the same signed value means
different things, is a security risk.

Usage:
    from safesign import default_builder

    signer = default_builder("secret key").build()
    signed = signer.sign("hello world!")
    assert signer.unsign(signed) == "hello world!"
"""

import logging
from typing import Optional, Union

from . import b64
from .algorithm import (
    DEFAULT_DIGEST_METHOD,
    AlgorithmSigner,
    DigestMethod,
    HMACAlgorithm,
    Signature,
    SigningAlgorithm,
    create_algorithm,
    digest_name,
    resolve_digest,
)
from .error_handling import (
    BadSignature,
    DecodeError,
    SignatureMismatch,
    SigningConfigurationError,
)
from .key_derivation import (
    DEFAULT_KEY_DERIVATION,
    DeriveKey,
    KeyMaterial,
    get_key_derivation,
)
from .separator import Separator
from .timed import TimestampSigner

logger = logging.getLogger(__name__)

DEFAULT_SALT = "itsdangerous.Signer"


class Signer:
    """
    Signs and unsigns strings with a derived key.

    The key is derived once by ``SignerBuilder.build``; a Signer holds no
    per-call state and can be shared between threads.
    """

    def __init__(self, derived_key: bytes, separator: Separator, algorithm: SigningAlgorithm):
        self._derived_key = bytes(derived_key)
        self._separator = separator
        self._algorithm = algorithm
        self._signature_encoder = b64.Base64SizedEncoder(algorithm.output_size)

    @property
    def separator(self) -> Separator:
        return self._separator

    @property
    def algorithm(self) -> SigningAlgorithm:
        return self._algorithm

    @property
    def signature_output_size(self) -> int:
        """Length of the base64 signature segment this signer emits."""
        return self._signature_encoder.output_size

    def get_signer(self) -> AlgorithmSigner:
        """Incremental signer keyed with the derived key."""
        return self._algorithm.get_signer(self._derived_key)

    def get_signature(self, value: bytes) -> Signature:
        return self._algorithm.get_signature(self._derived_key, value)

    def sign(self, value: str) -> str:
        """Sign ``value``, returning ``value + sep + base64(signature)``."""
        signature = self.get_signature(value.encode("utf-8"))
        return "".join((value, self._separator.char, signature.base64_encode()))

    def verify_encoded_signature(self, value: Union[str, bytes], encoded_signature: str) -> bool:
        """
        Check a base64 signature against ``value``.

        Signatures that fail to decode, and text values that cannot be
        encoded as UTF-8 (lone surrogates), count as mismatches.
        """
        if isinstance(value, str):
            try:
                value = value.encode("utf-8")
            except UnicodeEncodeError:
                return False
        try:
            code = self._signature_encoder.decode(encoded_signature)
        except DecodeError:
            return False
        return self.get_signature(value) == Signature(code)

    def unsign(self, signed_value: str) -> str:
        """
        Verify ``signed_value`` and return the value it carries.

        Raises:
            SeparatorNotFound: No separator in ``signed_value``
            SignatureMismatch: The signature is malformed or does not match
        """
        value, encoded_signature = self._separator.split(signed_value)
        if self.verify_encoded_signature(value, encoded_signature):
            return value
        raise SignatureMismatch(encoded_signature, value)

    def unsign_to_string(self, signed_value: str) -> str:
        return self.unsign(signed_value)

    def validate(self, signed_value: str) -> bool:
        """Return True if ``signed_value`` unsigns, without raising."""
        try:
            self.unsign(signed_value)
        except BadSignature:
            return False
        return True

    def into_timestamp_signer(self) -> TimestampSigner:
        """Wrap this signer in a ``TimestampSigner`` (the key is not re-derived)."""
        return TimestampSigner(self)

    def __repr__(self) -> str:
        return f"Signer(algorithm={self._algorithm!r}, separator={self._separator!r})"


class SignerBuilder:
    """
    Collects the signing parameters and derives the key once in ``build``.

    Defaults: salt ``itsdangerous.Signer``, separator ``.``, sha1 digest,
    HMAC signing and django-concat key derivation.
    """

    def __init__(self, secret_key: KeyMaterial):
        self.secret_key = secret_key
        self.salt: KeyMaterial = DEFAULT_SALT
        self.separator = Separator()
        self.digest_method: DigestMethod = DEFAULT_DIGEST_METHOD
        self.key_derivation: DeriveKey = get_key_derivation(DEFAULT_KEY_DERIVATION)
        self.algorithm: Optional[Union[str, SigningAlgorithm]] = None

    def with_salt(self, salt: KeyMaterial) -> "SignerBuilder":
        self.salt = salt
        return self

    def with_separator(self, separator: Union[str, Separator]) -> "SignerBuilder":
        if not isinstance(separator, Separator):
            separator = Separator(separator)
        self.separator = separator
        return self

    def with_digest_method(self, digest_method: DigestMethod) -> "SignerBuilder":
        resolve_digest(digest_method)
        self.digest_method = digest_method
        return self

    def with_key_derivation(self, key_derivation: Union[str, DeriveKey]) -> "SignerBuilder":
        self.key_derivation = get_key_derivation(key_derivation)
        return self

    def with_algorithm(self, algorithm: Union[str, SigningAlgorithm]) -> "SignerBuilder":
        """
        Use "hmac", "none", or a ``SigningAlgorithm`` instance.

        An ``HMACAlgorithm`` instance also sets the digest used for key
        derivation, so the derived key matches the MAC's digest.
        """
        if isinstance(algorithm, str):
            create_algorithm(algorithm, self.digest_method)
        elif isinstance(algorithm, HMACAlgorithm):
            self.digest_method = algorithm.digest_method
        self.algorithm = algorithm
        return self

    def _build_algorithm(self) -> SigningAlgorithm:
        if isinstance(self.algorithm, HMACAlgorithm):
            derivation_digest = resolve_digest(self.digest_method)().name
            mac_digest = self.algorithm.digest_method().name
            if derivation_digest != mac_digest:
                raise SigningConfigurationError(
                    f"Key derivation digest {derivation_digest} does not match "
                    f"the HMAC digest {mac_digest}",
                    {"digest_method": derivation_digest, "algorithm_digest": mac_digest},
                )
            return self.algorithm
        if isinstance(self.algorithm, SigningAlgorithm):
            return self.algorithm
        return create_algorithm(self.algorithm or "hmac", self.digest_method)

    def build(self) -> Signer:
        """Derive the key and construct the Signer."""
        algorithm = self._build_algorithm()
        derived_key = self.key_derivation.derive_key(
            self.secret_key, self.salt, self.digest_method
        )
        logger.debug(
            f"Signer built: algorithm={algorithm!r}, digest={digest_name(self.digest_method)}, "
            f"key_derivation={self.key_derivation.name}, separator={self.separator.char!r}"
        )
        return Signer(derived_key, self.separator, algorithm)

    def build_timestamp_signer(self) -> TimestampSigner:
        return self.build().into_timestamp_signer()


def default_builder(secret_key: KeyMaterial) -> SignerBuilder:
    """Builder using sha1, HMAC and django-concat key derivation."""
    return SignerBuilder(secret_key)

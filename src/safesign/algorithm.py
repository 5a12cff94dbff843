"""
Signing Algorithms
==================

Turns a derived key and a message into a fixed-size ``Signature``.

- ``HMACAlgorithm`` computes an HMAC over any fixed-size hashlib digest.
- ``NoneAlgorithm`` produces an empty signature (testing / framing only).

Each algorithm hands out a stateful ``AlgorithmSigner`` so several inputs can
be folded into one MAC computation without concatenating buffers.
"""

import hashlib
import hmac
import logging
from abc import ABC, abstractmethod
from typing import Any, Callable, Union

from . import b64
from .error_handling import SigningConfigurationError

logger = logging.getLogger(__name__)

DigestMethod = Union[str, Callable[..., Any]]

DEFAULT_DIGEST_METHOD = "sha1"


def resolve_digest(digest_method: DigestMethod) -> Callable[..., Any]:
    """
    Resolve a hashlib name (or constructor) to a digest constructor.

    Raises:
        SigningConfigurationError: Unknown digest, or one without a fixed size
    """
    if isinstance(digest_method, str):
        name = digest_method.lower()
        if name not in hashlib.algorithms_available:
            raise SigningConfigurationError(
                f"Unknown digest method: {digest_method}",
                {"digest_method": digest_method},
            )

        def constructor(data: bytes = b""):
            return hashlib.new(name, data)

        constructor.__name__ = name
    elif callable(digest_method):
        constructor = digest_method
    else:
        raise SigningConfigurationError(
            f"Digest method must be a hashlib name or constructor, got {type(digest_method).__name__}"
        )

    if constructor().digest_size <= 0:
        raise SigningConfigurationError(
            f"Digest method {digest_name(constructor)} has no fixed output size",
            {"digest_method": digest_name(constructor)},
        )
    return constructor


def digest_name(digest_method: DigestMethod) -> str:
    if isinstance(digest_method, str):
        return digest_method.lower()
    return getattr(digest_method, "__name__", repr(digest_method)).replace("openssl_", "")


class Signature:
    """
    A computed signature.

    Equality uses ``hmac.compare_digest`` so comparing a computed signature
    with an attacker-supplied one does not leak how many bytes matched.
    """

    __slots__ = ("_code",)
    __hash__ = None

    def __init__(self, code: bytes):
        self._code = bytes(code)

    @property
    def code(self) -> bytes:
        return self._code

    def __len__(self) -> int:
        return len(self._code)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Signature):
            return NotImplemented
        return hmac.compare_digest(self._code, other._code)

    def base64_encode(self) -> str:
        return b64.encode(self._code)

    def __repr__(self) -> str:
        return f"Signature({self.base64_encode()!r})"


class AlgorithmSigner(ABC):
    """Incremental signature builder returned by ``SigningAlgorithm.get_signer``."""

    def __init__(self):
        self._finished = False

    @abstractmethod
    def _update(self, value: bytes) -> None:
        pass

    @abstractmethod
    def _finalize(self) -> bytes:
        pass

    def input(self, value: bytes) -> None:
        """Feed ``value`` into the signature computation."""
        if self._finished:
            raise RuntimeError("Signer already produced its signature")
        self._update(value)

    def input_chained(self, value: bytes) -> "AlgorithmSigner":
        self.input(value)
        return self

    def sign(self) -> Signature:
        """Produce the signature. The signer cannot be used afterwards."""
        if self._finished:
            raise RuntimeError("Signer already produced its signature")
        self._finished = True
        return Signature(self._finalize())


class SigningAlgorithm(ABC):
    """Interface for signature generation algorithms."""

    @property
    @abstractmethod
    def output_size(self) -> int:
        """Size in bytes of the signatures produced by this algorithm."""
        pass

    @abstractmethod
    def get_signer(self, key: bytes) -> AlgorithmSigner:
        """Return a signer that builds a signature for ``key`` and fed inputs."""
        pass

    def get_signature(self, key: bytes, value: bytes) -> Signature:
        return self.get_signer(key).input_chained(value).sign()

    def verify_signature(self, key: bytes, value: bytes, signature: Signature) -> bool:
        return self.get_signature(key, value) == signature


class NoneSigner(AlgorithmSigner):
    def _update(self, value: bytes) -> None:
        pass

    def _finalize(self) -> bytes:
        return b""


class NoneAlgorithm(SigningAlgorithm):
    """Does not sign anything; every signature is empty."""

    @property
    def output_size(self) -> int:
        return 0

    def get_signer(self, key: bytes) -> AlgorithmSigner:
        return NoneSigner()

    def __repr__(self) -> str:
        return "NoneAlgorithm()"


class HMACSigner(AlgorithmSigner):
    def __init__(self, key: bytes, digest_constructor: Callable[..., Any]):
        super().__init__()
        self._mac = hmac.new(key, digestmod=digest_constructor)

    def _update(self, value: bytes) -> None:
        self._mac.update(value)

    def _finalize(self) -> bytes:
        return self._mac.digest()


class HMACAlgorithm(SigningAlgorithm):
    """HMAC over a hashlib digest. Output size equals the digest size."""

    def __init__(self, digest_method: DigestMethod = DEFAULT_DIGEST_METHOD):
        self.digest_method = resolve_digest(digest_method)
        self._output_size = self.digest_method().digest_size

    @property
    def output_size(self) -> int:
        return self._output_size

    def get_signer(self, key: bytes) -> AlgorithmSigner:
        return HMACSigner(key, self.digest_method)

    def __repr__(self) -> str:
        return f"HMACAlgorithm({digest_name(self.digest_method)!r})"


def create_algorithm(name: str, digest_method: DigestMethod = DEFAULT_DIGEST_METHOD) -> SigningAlgorithm:
    """Create a signing algorithm from its configuration name ("hmac" or "none")."""
    key = name.lower()
    if key == "hmac":
        return HMACAlgorithm(digest_method)
    if key == "none":
        return NoneAlgorithm()
    raise SigningConfigurationError(f"Unknown signing algorithm: {name}", {"algorithm": name})

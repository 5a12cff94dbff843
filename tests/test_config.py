"""
Tests for SignerConfig validation and the signer factories.
"""

import logging
from datetime import datetime, timedelta, timezone

import pytest

from safesign import (
    InvalidSeparator,
    MultiSerializer,
    MultiSigner,
    Separator,
    Serializer,
    SignatureMismatch,
    SignerConfig,
    SigningConfigurationError,
    TimedSerializer,
    TimestampSigner,
    create_multi_signer,
    create_serializer,
    create_signer,
    create_signer_config,
    create_timestamp_signer,
    default_builder,
)


class TestSignerConfig:
    """Test configuration defaults and validation."""

    def test_defaults(self):
        config = SignerConfig(secret_key="hello")
        assert config.salt == "itsdangerous.Signer"
        assert config.separator == "."
        assert config.digest_method == "sha1"
        assert config.key_derivation == "django-concat"
        assert config.algorithm == "hmac"
        assert config.fallback_secret_keys == []

    def test_defaults_match_default_builder(self):
        signer = create_signer(SignerConfig(secret_key="hello"))
        assert signer.sign("this is a test") == default_builder("hello").build().sign("this is a test")

    def test_empty_secret_key(self):
        with pytest.raises(ValueError):
            SignerConfig(secret_key="")

    def test_invalid_separator(self):
        with pytest.raises(InvalidSeparator):
            SignerConfig(secret_key="hello", separator="a")

    def test_invalid_digest(self):
        with pytest.raises(SigningConfigurationError):
            SignerConfig(secret_key="hello", digest_method="md7")

    def test_invalid_key_derivation(self):
        with pytest.raises(SigningConfigurationError):
            SignerConfig(secret_key="hello", key_derivation="scrypt")

    def test_invalid_algorithm(self):
        with pytest.raises(SigningConfigurationError):
            SignerConfig(secret_key="hello", algorithm="rsa")

    def test_empty_fallback_key(self):
        with pytest.raises(ValueError):
            SignerConfig(secret_key="hello", fallback_secret_keys=["old", ""])

    def test_none_algorithm_warns(self, caplog):
        with caplog.at_level(logging.WARNING, logger="safesign.config"):
            SignerConfig(secret_key="hello", algorithm="none")
        assert "none" in caplog.text

    def test_validation_errors_are_value_errors(self):
        """Configuration errors can be caught as plain ValueError."""
        for kwargs in ({"separator": "="}, {"digest_method": "nope"}):
            with pytest.raises(ValueError):
                SignerConfig(secret_key="hello", **kwargs)


class TestFromEnv:
    """Test loading configuration from environment variables."""

    def test_minimal(self):
        config = SignerConfig.from_env(environ={"SAFESIGN_SECRET_KEY": "hello"})
        assert config.secret_key == "hello"
        assert config.digest_method == "sha1"

    def test_all_fields(self):
        config = SignerConfig.from_env(
            environ={
                "SAFESIGN_SECRET_KEY": "new",
                "SAFESIGN_SALT": "cookies",
                "SAFESIGN_SEPARATOR": "!",
                "SAFESIGN_DIGEST_METHOD": "sha256",
                "SAFESIGN_KEY_DERIVATION": "hmac",
                "SAFESIGN_ALGORITHM": "hmac",
                "SAFESIGN_FALLBACK_SECRET_KEYS": "old, older ,",
            }
        )
        assert config.salt == "cookies"
        assert config.separator == "!"
        assert config.digest_method == "sha256"
        assert config.key_derivation == "hmac"
        assert config.fallback_secret_keys == ["old", "older"]

    def test_custom_prefix(self):
        config = SignerConfig.from_env(prefix="APP_", environ={"APP_SECRET_KEY": "hello"})
        assert config.secret_key == "hello"

    def test_missing_secret_key(self):
        with pytest.raises(ValueError, match="SAFESIGN_SECRET_KEY"):
            SignerConfig.from_env(environ={})

    def test_reads_os_environ(self, monkeypatch):
        monkeypatch.setenv("SAFESIGN_SECRET_KEY", "from-env")
        assert SignerConfig.from_env().secret_key == "from-env"


class TestFactories:
    """Test creating signers and serializers from a configuration."""

    def test_create_signer_config_overrides(self):
        config = create_signer_config("hello", digest_method="sha256", salt="s")
        assert config.digest_method == "sha256"
        assert config.salt == "s"

    def test_unknown_override_warns(self, caplog):
        with caplog.at_level(logging.WARNING, logger="safesign.config"):
            config = create_signer_config("hello", max_age=60)
        assert "max_age" in caplog.text
        assert config.secret_key == "hello"

    def test_create_signer(self):
        config = create_signer_config("hello", separator="!")
        signer = create_signer(config)
        assert signer.separator == Separator("!")
        assert signer.unsign(signer.sign("value")) == "value"

    def test_create_timestamp_signer(self):
        signer = create_timestamp_signer(SignerConfig(secret_key="hello"))
        assert isinstance(signer, TimestampSigner)
        assert signer.unsign(signer.sign("value")).value == "value"

    def test_create_multi_signer(self):
        config = create_signer_config("new", fallback_secret_keys=["old"])
        multi = create_multi_signer(config)
        assert isinstance(multi, MultiSigner)

        old_token = default_builder("old").build().sign("legacy")
        assert multi.unsign(old_token) == "legacy"

        with pytest.raises(SignatureMismatch):
            multi.unsign(default_builder("other").build().sign("legacy"))

    def test_multi_signer_has_no_timed_mode(self):
        """Rotated timed tokens would lose their timestamp, so there is no timed variant."""
        config = create_signer_config("new", fallback_secret_keys=["old"])
        with pytest.raises(TypeError):
            create_multi_signer(config, timed=True)

    def test_multi_signer_leaves_old_timed_token_framed(self):
        config = create_signer_config("new", fallback_secret_keys=["old"])
        signed_at = datetime.now(timezone.utc) - timedelta(days=3650)
        old_token = default_builder("old").build_timestamp_signer().sign_with_timestamp("v", signed_at)

        unsigned = create_multi_signer(config).unsign(old_token)
        assert unsigned.startswith("v.")
        assert unsigned != "v"

    def test_create_serializer(self):
        serializer = create_serializer(SignerConfig(secret_key="hello"))
        assert isinstance(serializer, Serializer)
        assert serializer.unsign(serializer.sign({"a": 1})) == {"a": 1}

    def test_create_serializer_with_fallbacks(self):
        config = create_signer_config("new", fallback_secret_keys=["old"])
        serializer = create_serializer(config)
        assert isinstance(serializer, MultiSerializer)

        old = Serializer(default_builder("old").build())
        assert serializer.unsign(old.sign([1, 2])) == [1, 2]

    def test_create_timed_serializer(self):
        serializer = create_serializer(SignerConfig(secret_key="hello"), timed=True)
        assert isinstance(serializer, TimedSerializer)
        assert serializer.unsign(serializer.sign("v")).value == "v"

    def test_timed_serializer_rejects_fallbacks(self):
        config = create_signer_config("new", fallback_secret_keys=["old"])
        with pytest.raises(ValueError):
            create_serializer(config, timed=True)

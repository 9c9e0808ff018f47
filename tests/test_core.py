"""Tests for core infrastructure modules."""

from unittest.mock import patch
import logging
import pytest
from pydantic import ValidationError as PydanticValidationError

from b2buckets.base.auth import Authorization, Capability
from b2buckets.base.config import B2Config, validate_config
from b2buckets.base.exceptions import CapabilityError, TransportError
from b2buckets.base.logger import B2Logger, StructuredFormatter
from b2buckets.base.retry import retry


# ══════════════════════════════════════════════════════════════════════
# Config
# ══════════════════════════════════════════════════════════════════════

class TestB2Config:
    def test_explicit_values(self):
        cfg = B2Config(
            account_id="acct",
            authorization_token="tok",
            api_url="https://api001.backblazeb2.com/",
            capabilities=["listBuckets"],
        )
        assert cfg.account_id == "acct"
        assert cfg.api_url == "https://api001.backblazeb2.com"
        assert cfg.capabilities == ["listBuckets"]
        assert cfg.max_attempts == 3

    def test_env_fallback(self, monkeypatch):
        monkeypatch.setenv("B2_ACCOUNT_ID", "env_acct")
        monkeypatch.setenv("B2_AUTHORIZATION_TOKEN", "env_tok")
        monkeypatch.setenv("B2_API_URL", "https://env.example.com")
        cfg = B2Config()
        assert cfg.account_id == "env_acct"
        assert cfg.authorization_token == "env_tok"
        assert cfg.api_url == "https://env.example.com"

    def test_explicit_beats_env(self, monkeypatch):
        monkeypatch.setenv("B2_ACCOUNT_ID", "env_acct")
        monkeypatch.setenv("B2_AUTHORIZATION_TOKEN", "env_tok")
        monkeypatch.setenv("B2_API_URL", "https://env.example.com")
        cfg = B2Config(account_id="mine")
        assert cfg.account_id == "mine"

    def test_missing_identity(self, monkeypatch):
        for var in ("B2_ACCOUNT_ID", "B2_AUTHORIZATION_TOKEN", "B2_API_URL"):
            monkeypatch.delenv(var, raising=False)
        with pytest.raises(PydanticValidationError, match="authorization_token"):
            B2Config(account_id="acct", api_url="https://x")

    def test_unknown_key_rejected(self):
        with pytest.raises(PydanticValidationError):
            B2Config(account_id="a", authorization_token="t", api_url="https://x", region="eu")


class TestValidateConfig:
    def test_returns_model(self):
        cfg = validate_config({
            "account_id": "a",
            "authorization_token": "t",
            "api_url": "https://x",
            "timeout": 5,
        })
        assert isinstance(cfg, B2Config)
        assert cfg.timeout == 5

    def test_bad_timeout(self):
        with pytest.raises(PydanticValidationError):
            validate_config({
                "account_id": "a",
                "authorization_token": "t",
                "api_url": "https://x",
                "timeout": 0,
            })


# ══════════════════════════════════════════════════════════════════════
# Authorization
# ══════════════════════════════════════════════════════════════════════

class TestAuthorization:
    def test_from_config_ignores_unknown_capabilities(self):
        cfg = B2Config(
            account_id="a",
            authorization_token="t",
            api_url="https://x",
            capabilities=["listBuckets", "readBucketReplications"],
        )
        auth = Authorization.from_config(cfg)
        assert auth.capabilities == frozenset({Capability.LIST_BUCKETS})

    def test_require_names_first_missing(self):
        auth = Authorization("a", "t", "https://x", frozenset({Capability.WRITE_BUCKETS}))
        with pytest.raises(CapabilityError) as exc_info:
            auth.require([Capability.WRITE_BUCKETS, Capability.WRITE_BUCKET_RETENTIONS])
        assert exc_info.value.capability == "writeBucketRetentions"

    def test_api_endpoint(self):
        auth = Authorization("a", "t", "https://api001.backblazeb2.com")
        assert auth.api_endpoint("b2_list_buckets") == (
            "https://api001.backblazeb2.com/b2api/v2/b2_list_buckets"
        )
        assert auth.headers() == {"Authorization": "t"}


# ══════════════════════════════════════════════════════════════════════
# Retry
# ══════════════════════════════════════════════════════════════════════

class TestRetry:
    def test_success_no_retry(self):
        call_count = 0

        @retry(max_attempts=3, base_delay=0)
        def ok():
            nonlocal call_count
            call_count += 1
            return "ok"

        assert ok() == "ok"
        assert call_count == 1

    def test_retries_transport_errors_by_default(self):
        call_count = 0

        @retry(max_attempts=3, base_delay=0)
        def fail_twice():
            nonlocal call_count
            call_count += 1
            if call_count < 3:
                raise TransportError("connection reset")
            return "ok"

        assert fail_twice() == "ok"
        assert call_count == 3

    def test_max_attempts_exceeded(self):
        @retry(max_attempts=2, base_delay=0, retryable_exceptions=(ValueError,))
        def always_fail():
            raise ValueError("nope")

        with pytest.raises(ValueError):
            always_fail()

    def test_non_retryable_raises_immediately(self):
        call_count = 0

        @retry(max_attempts=3, base_delay=0, retryable_exceptions=(ValueError,))
        def type_err():
            nonlocal call_count
            call_count += 1
            raise TypeError("not retryable")

        with pytest.raises(TypeError):
            type_err()
        assert call_count == 1

    def test_should_retry_predicate_stops_retries(self):
        call_count = 0

        @retry(
            max_attempts=3,
            base_delay=0,
            retryable_exceptions=(ValueError,),
            should_retry=lambda exc: str(exc) != "permanent",
        )
        def permanent():
            nonlocal call_count
            call_count += 1
            raise ValueError("permanent")

        with pytest.raises(ValueError):
            permanent()
        assert call_count == 1

    def test_backoff_delays(self):
        @retry(max_attempts=3, base_delay=1.0, backoff_factor=2.0, retryable_exceptions=(ValueError,))
        def always_fail():
            raise ValueError("nope")

        with patch("b2buckets.base.retry.time.sleep") as sleep:
            with pytest.raises(ValueError):
                always_fail()
        assert [c.args[0] for c in sleep.call_args_list] == [1.0, 2.0]


# ══════════════════════════════════════════════════════════════════════
# Logger
# ══════════════════════════════════════════════════════════════════════

class TestB2Logger:
    def test_log_operation(self, capfd):
        logger = B2Logger("test_b2")
        logger.logger.setLevel(logging.DEBUG)
        logger.info(
            "test message", account_id="acct-1", operation="b2_create_bucket", bucket="my-bucket"
        )
        captured = capfd.readouterr()
        assert "test message" in captured.err
        assert "acct-1" in captured.err
        assert "b2_create_bucket" in captured.err

    def test_structured_formatter(self):
        fmt = StructuredFormatter()
        record = logging.LogRecord(
            name="test", level=logging.INFO, pathname="", lineno=0,
            msg="hi", args=(), exc_info=None,
        )
        record.bucket = "photos"
        record.request_id = "abc"
        output = fmt.format(record)
        assert '"bucket": "photos"' in output
        assert '"request_id": "abc"' in output
        assert "account_id" not in output

"""
Unit Tests: Core Types and Errors

Tests:
    - Ok/Err result handling
    - ABSENT/REMOVED markers
    - Document shape check
    - Error construction, context and serialization
"""

import copy

import pytest

from sessionmerge.core.errors import (
    DecodeError,
    ErrorCode,
    ResolverError,
    SessionMergeError,
    StoreError,
)
from sessionmerge.core.types import ABSENT, REMOVED, Err, Ok, is_document


class TestResult:
    """Tests for Ok/Err."""

    def test_ok(self):
        result = Ok(3)
        assert result.is_ok()
        assert not result.is_err()
        assert result.unwrap() == 3
        assert result.unwrap_or(0) == 3

    def test_err(self):
        result = Err("nope")
        assert result.is_err()
        assert result.unwrap_or(0) == 0
        with pytest.raises(RuntimeError, match="nope"):
            result.unwrap()

    def test_map_and_flat_map(self):
        assert Ok(2).map(lambda v: v * 10).unwrap() == 20
        assert Ok(2).flat_map(lambda v: Err(f"bad {v}")).is_err()

        err = Err("x")
        assert err.map(lambda v: v * 10) is err
        assert err.flat_map(lambda v: Ok(v)) is err


class TestMarkers:
    """Tests for ABSENT and REMOVED."""

    def test_distinct_and_not_none(self):
        assert ABSENT is not REMOVED
        assert ABSENT is not None
        assert ABSENT != "absent"

    def test_identity_survives_copy(self):
        doc = {"a": REMOVED}
        assert copy.deepcopy(doc)["a"] is REMOVED
        assert copy.copy(ABSENT) is ABSENT

    def test_repr(self):
        assert repr(REMOVED) == "<REMOVED>"


class TestIsDocument:
    """Tests for is_document."""

    @pytest.mark.parametrize("value", [{}, {"a": 1}, {"a": {"b": [1, None]}}])
    def test_documents(self, value):
        assert is_document(value)

    @pytest.mark.parametrize("value", [None, [], "{}", 3, {1: "a"}, {"a": 1, 2: "b"}])
    def test_non_documents(self, value):
        assert not is_document(value)


class TestErrors:
    """Tests for the error taxonomy."""

    def test_hierarchy(self):
        assert issubclass(DecodeError, SessionMergeError)
        assert issubclass(StoreError, SessionMergeError)
        assert issubclass(ResolverError, SessionMergeError)
        assert issubclass(SessionMergeError, Exception)

    def test_factories_set_codes(self):
        assert DecodeError.malformed("json").code is ErrorCode.DECODE_MALFORMED_PAYLOAD
        assert DecodeError.not_a_document("json", "list").code is ErrorCode.DECODE_NOT_A_DOCUMENT
        assert DecodeError.encode_failed("json").code is ErrorCode.DECODE_ENCODE_FAILED
        assert StoreError.timeout("get", "k").code is ErrorCode.STORE_TIMEOUT
        assert StoreError.not_connected("redis").code is ErrorCode.STORE_NOT_CONNECTED
        assert StoreError.connection_failed("redis").code is ErrorCode.STORE_CONNECTION_FAILED
        assert StoreError.backend_failure("set", "k").code is ErrorCode.STORE_BACKEND_FAILURE

    def test_str_contains_code_and_short_id(self):
        error = StoreError.timeout("get", "session_abc")
        text = str(error)
        assert text.startswith("[STORE_TIMEOUT]")
        assert "session_abc" in text
        assert error.error_id[:8] in text

    def test_with_context_keeps_class_and_id(self):
        error = DecodeError.malformed("json")
        enriched = error.with_context(flags=7)

        assert isinstance(enriched, DecodeError)
        assert enriched.error_id == error.error_id
        assert enriched.context == {"source": "json", "flags": 7}
        assert error.context == {"source": "json"}

    def test_to_dict_includes_cause(self):
        cause = ValueError("bad byte")
        data = ResolverError.failed("cart", cause).to_dict()

        assert data["code"] == "RESOLVER_FAILED"
        assert data["code_value"] == 3001
        assert data["context"] == {"key": "cart"}
        assert data["cause"] == "ValueError: bad byte"

    def test_raisable(self):
        with pytest.raises(StoreError):
            raise StoreError.not_connected("redis")

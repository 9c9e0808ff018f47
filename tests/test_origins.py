import pytest

from b2buckets.base.exceptions import FieldValidationError, OriginConflictError
from b2buckets.domain.origins import (
    Full,
    Origin,
    SchemeOnly,
    Universal,
    classify_origin,
    validate_origins,
)


class TestClassifyOrigin:
    def test_universal(self):
        assert classify_origin("*") == Universal()

    def test_scheme_only(self):
        assert classify_origin("https") == SchemeOnly("https")

    def test_full_with_port(self):
        assert classify_origin("http://www.example.com:8000") == Full(
            "http", "www.example.com", 8000
        )

    def test_wildcard_host(self):
        kind = classify_origin("https://*.example.com")
        assert kind == Full("https", "*.example.com")
        assert kind.has_wildcard

    def test_bare_wildcard_host_with_port(self):
        assert classify_origin("https://*:8765") == Full("https", "*", 8765)

    def test_host_lowercased(self):
        assert classify_origin("https://WWW.Example.com").host == "www.example.com"

    @pytest.mark.parametrize("origin", [
        "",
        "ftp://example.com",
        "ftp",
        "ftp://*.*.example.com",
        "*://example.com",
        "https://example.com:*",
        "https://www.*.com",
        "https://ex*.com",
        "www.example.com:4545",
        "https://",
        "https://example.com/path",
        "https://user@example.com",
        "https://example.com:0",
        "https://example.com:65536",
        "https://example.com:80a",
        "https*",
    ])
    def test_invalid(self, origin):
        with pytest.raises(FieldValidationError) as exc_info:
            classify_origin(origin)
        assert exc_info.value.field == "allowed_origins"

    def test_origin_str_subclass(self):
        origin = Origin("https://example.com")
        assert origin == "https://example.com"
        assert isinstance(origin.kind, Full)

    def test_origin_rejects_invalid(self):
        with pytest.raises(FieldValidationError):
            Origin("gopher://example.com")


class TestValidateOrigins:
    @pytest.mark.parametrize("origins", [
        ["https://*", "http://*"],
        ["*"],
        ["https://example.com", "http://example.com:1234"],
        ["https", "http://example.com:1234"],
        ["https://*:8765", "http://www.example.com:4545"],
        ["https://*.example.com", "http://www.example.com"],
        ["https://www.example.com", "https://api.example.com"],
        ["https://example.com:443", "https://example.com:8443"],
    ])
    def test_valid_lists(self, origins):
        assert validate_origins(origins) == tuple(origins)

    def test_preserves_input_order(self):
        result = validate_origins(["https://b.example.com", "https://a.example.com"])
        assert [str(o) for o in result] == ["https://b.example.com", "https://a.example.com"]

    def test_empty_list_is_valid(self):
        assert validate_origins([]) == ()

    @pytest.mark.parametrize("others", [["https://*"], ["https"], ["http://a.com", "https"]])
    def test_universal_must_be_alone(self, others):
        with pytest.raises(OriginConflictError) as exc_info:
            validate_origins(["*", *others])
        assert exc_info.value.report == {"*": others}

    def test_duplicate_scheme_only(self):
        with pytest.raises(OriginConflictError) as exc_info:
            validate_origins(["https", "https"])
        assert exc_info.value.report == {"https": ["https"]}

    def test_scheme_only_covers_wildcard_host(self):
        with pytest.raises(OriginConflictError) as exc_info:
            validate_origins(["https://*", "https"])
        assert exc_info.value.report == {"https": ["https://*"]}

    def test_scheme_only_covers_full_origin(self):
        with pytest.raises(OriginConflictError):
            validate_origins(["http", "http://example.com:1234"])

    def test_wildcard_port_does_not_separate_hosts(self):
        with pytest.raises(OriginConflictError) as exc_info:
            validate_origins(["https://*:8765", "https://www.example.com:4545"])
        assert exc_info.value.report == {"https://*:8765": ["https://www.example.com:4545"]}

    def test_wildcard_subdomain_covers_host(self):
        with pytest.raises(OriginConflictError) as exc_info:
            validate_origins(["https://www.example.com", "https://*.example.com"])
        assert exc_info.value.report == {"https://*.example.com": ["https://www.example.com"]}

    def test_identical_full_origins(self):
        with pytest.raises(OriginConflictError):
            validate_origins(["https://example.com", "https://example.com"])

    def test_report_groups_by_broader_entry(self):
        with pytest.raises(OriginConflictError) as exc_info:
            validate_origins(["https", "https://a.com", "https://b.com", "http://c.com"])
        assert exc_info.value.report == {"https": ["https://a.com", "https://b.com"]}

    def test_item_errors_reported_before_conflicts(self):
        with pytest.raises(FieldValidationError):
            validate_origins(["*", "https", "ftp://example.com"])

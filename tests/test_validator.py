"""Tests for check record validation."""

import pytest

from uptime_worker.core.errors import CheckValidationError
from uptime_worker.core.validator import validate_check_data

from fakes import CHECK_ID, PREVIOUS_CHECK

REQUIRED_FIELDS = ["id", "user_phone", "protocol", "url", "method", "success_codes", "timeout_seconds"]


@pytest.mark.unit
class TestValidateCheckData:
    """Test validation of raw stored records."""

    def test_valid_record_is_accepted(self, raw_check):
        record = validate_check_data(raw_check)

        assert record.id == CHECK_ID
        assert record.protocol == "http"
        assert record.method == "get"
        assert record.success_codes == [200]
        assert record.timeout_seconds == 3
        assert record.state == "down"
        assert record.last_check == PREVIOUS_CHECK

    @pytest.mark.parametrize("field", REQUIRED_FIELDS)
    def test_missing_required_field_rejects_record(self, raw_check, field):
        del raw_check[field]

        with pytest.raises(CheckValidationError) as exc_info:
            validate_check_data(raw_check)

        assert exc_info.value.invalid_fields == [field]

    @pytest.mark.parametrize("field,value", [
        ("id", "too-short"),
        ("id", 12345678901234567890),
        ("user_phone", "1234567"),
        ("protocol", "ftp"),
        ("protocol", "HTTP"),
        ("url", "   "),
        ("method", "patch"),
        ("method", "GET"),
        ("success_codes", []),
        ("success_codes", "200"),
        ("success_codes", ["200"]),
        ("success_codes", [True]),
        ("timeout_seconds", 0),
        ("timeout_seconds", 6),
        ("timeout_seconds", 2.5),
        ("timeout_seconds", "3"),
        ("timeout_seconds", True),
    ])
    def test_invalid_required_field_rejects_record(self, raw_check, field, value):
        raw_check[field] = value

        with pytest.raises(CheckValidationError) as exc_info:
            validate_check_data(raw_check)

        assert field in exc_info.value.invalid_fields

    def test_all_invalid_fields_are_reported(self, raw_check):
        raw_check["protocol"] = "gopher"
        raw_check["timeout_seconds"] = 10

        with pytest.raises(CheckValidationError) as exc_info:
            validate_check_data(raw_check)

        assert exc_info.value.invalid_fields == ["protocol", "timeout_seconds"]

    @pytest.mark.parametrize("raw", [None, "check", 42, ["id"]])
    def test_non_mapping_is_rejected(self, raw):
        with pytest.raises(CheckValidationError) as exc_info:
            validate_check_data(raw)

        assert set(exc_info.value.invalid_fields) == set(REQUIRED_FIELDS)

    @pytest.mark.parametrize("state", [None, "unknown", "UP", 1])
    def test_invalid_state_defaults_to_down(self, raw_check, state):
        raw_check["state"] = state

        assert validate_check_data(raw_check).state == "down"

    def test_missing_state_defaults_to_down(self, raw_check):
        del raw_check["state"]

        assert validate_check_data(raw_check).state == "down"

    @pytest.mark.parametrize("last_check", [None, 0, -5, "yesterday", False, float("nan")])
    def test_invalid_last_check_means_never_checked(self, raw_check, last_check):
        raw_check["last_check"] = last_check

        assert validate_check_data(raw_check).last_check is None

    def test_whole_number_float_timeout_is_accepted(self, raw_check):
        raw_check["timeout_seconds"] = 5.0

        assert validate_check_data(raw_check).timeout_seconds == 5

    def test_url_is_stripped(self, raw_check):
        raw_check["url"] = "  example.com/health  "

        assert validate_check_data(raw_check).url == "example.com/health"

    def test_id_length_is_measured_without_surrounding_whitespace(self, raw_check):
        raw_check["id"] = f" {CHECK_ID} "

        assert validate_check_data(raw_check).id == f" {CHECK_ID} "

    def test_unknown_fields_are_preserved(self, raw_check):
        raw_check["created_by"] = "api"

        record = validate_check_data(raw_check)

        assert record.model_dump()["created_by"] == "api"

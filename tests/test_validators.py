"""Tests for vault key validation."""
import pytest

from sectool.utils import ValidationError, validate_secret_key


class TestValidateSecretKey:

    def test_valid(self):
        assert validate_secret_key("DB_PASSWORD") == "DB_PASSWORD"

    @pytest.mark.parametrize("key", ["", "A=B", "A\nB", "A\rB", "A\x00B"])
    def test_invalid(self, key):
        with pytest.raises(ValidationError):
            validate_secret_key(key)

    def test_too_long(self):
        with pytest.raises(ValidationError):
            validate_secret_key("K" * 257)

    def test_not_a_string(self):
        with pytest.raises(ValidationError):
            validate_secret_key(42)

    def test_is_value_error(self):
        with pytest.raises(ValueError):
            validate_secret_key("")

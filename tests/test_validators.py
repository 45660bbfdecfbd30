"""Tests for account and upload validators."""

import pytest

from src.utils.validators import (
    PasswordStrengthValidator,
    UploadFileValidator,
    UsernameValidator,
)

ALLOWED = [".mp3", ".wav", ".pdf"]


class TestPasswordStrengthValidator:
    @pytest.mark.parametrize("password", ["Passw0rd", "Abcdefg1", "xY9 with spaces"])
    def test_strong_passwords(self, password):
        assert PasswordStrengthValidator.is_valid(password)

    @pytest.mark.parametrize(
        "password",
        ["", None, "Pass0rd", "password1", "PASSWORD1", "Password"],
    )
    def test_weak_passwords(self, password):
        assert not PasswordStrengthValidator.is_valid(password)

    def test_validate_lists_each_broken_rule(self):
        codes = {error.code for error in PasswordStrengthValidator.validate("abc")}
        assert codes == {
            "PASSWORD_TOO_SHORT",
            "PASSWORD_MISSING_UPPERCASE",
            "PASSWORD_MISSING_DIGIT",
        }

    def test_validate_strong_password_has_no_errors(self):
        assert PasswordStrengthValidator.validate("Passw0rd") == []

    def test_length_is_capped(self):
        longest = "Aa1" + "x" * (PasswordStrengthValidator.MAX_LENGTH - 3)

        assert PasswordStrengthValidator.is_valid(longest)
        assert not PasswordStrengthValidator.is_valid(longest + "x")

        errors = PasswordStrengthValidator.validate(longest + "x")
        assert [error.code for error in errors] == ["PASSWORD_TOO_LONG"]
        assert errors[0].details["max_length"] == 128


class TestUsernameValidator:
    def test_length_bounds(self):
        assert UsernameValidator.is_valid("abc")
        assert UsernameValidator.is_valid("a" * 20)
        assert not UsernameValidator.is_valid("ab")
        assert not UsernameValidator.is_valid("a" * 21)

    def test_surrounding_whitespace_is_not_counted(self):
        assert UsernameValidator.normalize("  alice  ") == "alice"
        assert not UsernameValidator.is_valid("  ab  ")


class TestUploadFileValidator:
    def test_extension_is_lowercased(self):
        assert UploadFileValidator.extension_of("Song.MP3") == ".mp3"
        assert UploadFileValidator.extension_of(None) == ""

    def test_valid_upload(self):
        assert UploadFileValidator.validate("song.wav", 10, ALLOWED, 100) == []

    def test_rejects_disallowed_type(self):
        errors = UploadFileValidator.validate("song.exe", 10, ALLOWED, 100)
        assert [error.message for error in errors] == ["Invalid file type"]

    def test_rejects_empty_file(self):
        errors = UploadFileValidator.validate("song.mp3", 0, ALLOWED, 100)
        assert [error.code for error in errors] == ["EMPTY_FILE"]

    def test_rejects_oversized_file(self):
        errors = UploadFileValidator.validate("song.mp3", 101, ALLOWED, 100)
        assert errors[0].code == "FILE_TOO_LARGE"
        assert errors[0].details["max_bytes"] == 100


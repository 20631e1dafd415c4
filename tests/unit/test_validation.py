"""Tests for registration field validation."""

import pytest

from accountkit.core.results import ErrorKind
from accountkit.services.validation import REGISTRATION_RULES, validate_fields

_VALID = {"email": "bob@example.com", "screenName": "bob", "password": "Hunter!2"}


def _validate(**overrides):
    return validate_fields({**_VALID, **overrides}, REGISTRATION_RULES)


class TestValidateFields:
    def test_valid_input_passes(self):
        assert _validate() is None

    def test_collects_every_failing_field(self):
        failure = _validate(email="nope", screenName="", password="abc")

        assert failure is not None
        assert failure.kind is ErrorKind.VALIDATION
        assert set(failure.fields) == {"email", "screenName", "password"}

    def test_collects_every_reason_for_one_field(self):
        failure = _validate(password="abc")

        assert failure.fields["password"] == (
            "must be between 6 and 1024 characters",
            "must contain at least one uppercase letter",
            "must contain at least one symbol",
        )


class TestEmailRules:
    @pytest.mark.parametrize(
        "email",
        [
            "plainaddress",
            "@",
            "a@",
            "a b@example.com",
            "a@example.com\n",
            "a@example.com ",
        ],
    )
    def test_rejects_malformed(self, email):
        assert "email" in _validate(email=email).fields

    def test_rejects_over_255_characters(self):
        email = "a" * 250 + "@x.com"
        failure = _validate(email=email)
        assert failure.fields["email"] == ("must be at most 255 characters",)


class TestScreenNameRules:
    def test_accepts_boundaries(self):
        assert _validate(screenName="x") is None
        assert _validate(screenName="x" * 32) is None

    def test_rejects_over_32_characters(self):
        assert "screenName" in _validate(screenName="x" * 33).fields


class TestPasswordRules:
    def test_accepts_minimum_length(self):
        assert _validate(password="Abcd!e") is None

    def test_rejects_over_1024_characters(self):
        assert "password" in _validate(password="A!" + "a" * 1023).fields

    def test_rejects_non_ascii(self):
        failure = _validate(password="Pässword!")
        assert failure.fields["password"] == (
            "may only contain ASCII letters, digits and symbols",
        )

    def test_requires_uppercase(self):
        failure = _validate(password="hunter!2")
        assert failure.fields["password"] == (
            "must contain at least one uppercase letter",
        )

    @pytest.mark.parametrize("symbol", list("!/:@[`{~"))
    def test_accepts_each_symbol_range(self, symbol):
        assert _validate(password=f"Hunter2{symbol}") is None

    def test_rejects_password_without_symbol(self):
        failure = _validate(password="Hunter22")
        assert failure.fields["password"] == ("must contain at least one symbol",)

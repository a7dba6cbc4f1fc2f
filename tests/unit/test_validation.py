"""
Tests for validate() against the sign-in and sign-up schemas and ad-hoc schemas.
"""

import pytest

from liveauth.forms import sign_in_schema, sign_up_schema
from liveauth.schema import CrossFieldRule, FieldKind, FieldSpec, FormSchema
from liveauth.validation import Invalid, Valid, validate, validate_field


# =============================================================================
# Required fields
# =============================================================================


class TestRequiredFields:
    @pytest.mark.parametrize("missing", ["firstName", "lastName", "email"])
    def test_missing_required_field_is_reported(self, valid_sign_up, missing):
        del valid_sign_up[missing]
        result = validate(sign_up_schema, valid_sign_up)

        assert isinstance(result, Invalid)
        assert missing in result.errors

    @pytest.mark.parametrize("missing", ["firstName", "lastName", "email"])
    def test_empty_required_field_is_reported(self, valid_sign_up, missing):
        valid_sign_up[missing] = ""
        result = validate(sign_up_schema, valid_sign_up)

        assert not result.is_valid
        assert result.errors[missing].endswith("is required")

    def test_required_messages_use_labels(self):
        result = validate(sign_up_schema, {})

        assert result.errors["firstName"] == "First name is required"
        assert result.errors["lastName"] == "Last name is required"
        assert result.errors["email"] == "Email is required"
        assert result.errors["terms"] == "Terms is required"

    def test_sign_in_missing_email(self):
        result = validate(sign_in_schema, {"password": "abcdefgh"})
        assert result.errors == {"email": "Email is required"}

    def test_none_input_treated_as_empty(self):
        result = validate(sign_in_schema, None)
        assert result.errors["email"] == "Email is required"

    def test_whitespace_counts_as_a_value(self):
        # Values are not trimmed, so whitespace satisfies "required"
        result = validate(sign_up_schema, {"firstName": "   "})
        assert "firstName" not in result.errors

    def test_required_error_skips_further_checks(self):
        schema = FormSchema("f", fields=(FieldSpec("email", FieldKind.EMAIL, required=True, min_length=5),))
        assert validate(schema, {"email": ""}).errors == {"email": "Email is required"}


# =============================================================================
# Field shape checks
# =============================================================================


class TestEmailShape:
    def test_invalid_email(self):
        result = validate(sign_in_schema, {"email": "not-an-email", "password": "abcdefgh"})
        assert result.errors == {"email": "Invalid email address"}

    def test_short_valid_email(self):
        result = validate(sign_in_schema, {"email": "a@b.co", "password": "abcdefgh"})
        assert "email" not in result.errors
        assert result.is_valid

    @pytest.mark.parametrize("email", ["a@", "@b.co", "a b@c.co", "a@b"])
    def test_malformed_emails(self, email):
        assert validate(sign_in_schema, {"email": email, "password": "abcdefgh"}).errors == {
            "email": "Invalid email address"
        }

    def test_optional_empty_email_not_checked(self):
        schema = FormSchema("f", fields=(FieldSpec("backup", FieldKind.EMAIL),))
        assert validate(schema, {"backup": ""}).is_valid


class TestPasswordLength:
    def test_seven_characters_rejected(self):
        result = validate(sign_in_schema, {"email": "a@b.co", "password": "abcdefg"})
        assert result.errors == {"password": "Password must be at least 8 characters"}

    def test_eight_characters_accepted(self):
        result = validate(sign_in_schema, {"email": "a@b.co", "password": "abcdefgh"})
        assert "password" not in result.errors

    def test_empty_password_reports_length(self):
        result = validate(sign_in_schema, {"email": "a@b.co", "password": ""})
        assert result.errors == {"password": "Password must be at least 8 characters"}

    def test_missing_password_reports_length(self):
        result = validate(sign_in_schema, {"email": "a@b.co"})
        assert result.errors == {"password": "Password must be at least 8 characters"}


class TestTerms:
    def test_unchecked_terms(self, valid_sign_up):
        valid_sign_up["terms"] = False
        assert validate(sign_up_schema, valid_sign_up).errors == {"terms": "You must accept the terms"}

    @pytest.mark.parametrize("raw", ["on", "true", "1", "yes", "TRUE"])
    def test_checkbox_strings_accepted(self, valid_sign_up, raw):
        valid_sign_up["terms"] = raw
        result = validate(sign_up_schema, valid_sign_up)
        assert result.is_valid
        assert result.values["terms"] is True

    @pytest.mark.parametrize("raw", ["off", "false", "0", "no"])
    def test_false_strings_rejected(self, valid_sign_up, raw):
        valid_sign_up["terms"] = raw
        assert validate(sign_up_schema, valid_sign_up).errors == {"terms": "You must accept the terms"}

    def test_garbage_boolean(self, valid_sign_up):
        valid_sign_up["terms"] = "maybe"
        assert validate(sign_up_schema, valid_sign_up).errors == {"terms": "Terms must be a boolean"}


class TestFormatAndTypes:
    def test_regex_format(self):
        schema = FormSchema("f", fields=(FieldSpec("zip", format=r"\d{5}", label="ZIP code"),))
        assert validate(schema, {"zip": "1234"}).errors == {"zip": "Invalid zip code"}
        assert validate(schema, {"zip": "12345"}).is_valid

    def test_predicate_format(self):
        schema = FormSchema("f", fields=(FieldSpec("nick", format=lambda v: v.isalpha()),))
        assert validate(schema, {"nick": "ada1"}).errors == {"nick": "Invalid nick"}

    def test_non_string_text_value(self):
        schema = FormSchema("f", fields=(FieldSpec("name"),))
        assert validate(schema, {"name": 42}).errors == {"name": "Name must be a string"}

    def test_validate_field_returns_normalized_value(self):
        value, error = validate_field(sign_up_schema.get_field("terms"), "on")
        assert (value, error) == (True, None)


# =============================================================================
# Cross-field rules
# =============================================================================


class TestPasswordConfirmation:
    def test_mismatch(self, valid_sign_up):
        valid_sign_up["password"] = "abcdefgh"
        valid_sign_up["confirmPassword"] = "abcdefgi"
        result = validate(sign_up_schema, valid_sign_up)

        assert isinstance(result, Invalid)
        assert result.errors["confirmPassword"] == "Passwords do not match"

    def test_match(self, valid_sign_up):
        valid_sign_up["password"] = "abcdefgh"
        valid_sign_up["confirmPassword"] = "abcdefgh"
        result = validate(sign_up_schema, valid_sign_up)

        assert "confirmPassword" not in result.errors

    def test_rule_skipped_when_dependent_failed(self, valid_sign_up):
        valid_sign_up["password"] = "short"
        valid_sign_up["confirmPassword"] = "different"
        result = validate(sign_up_schema, valid_sign_up)

        assert result.errors == {"password": "Password must be at least 8 characters"}

    def test_first_writer_wins_on_target(self):
        schema = FormSchema(
            "f",
            fields=(FieldSpec("a"), FieldSpec("b"), FieldSpec("c")),
            rules=(
                CrossFieldRule(("a", "c"), lambda v: False, "first", "c"),
                CrossFieldRule(("b", "c"), lambda v: False, "second", "c"),
            ),
        )
        assert validate(schema, {}).errors == {"c": "first"}

    def test_rule_does_not_overwrite_field_error(self):
        schema = FormSchema(
            "f",
            fields=(FieldSpec("a"), FieldSpec("b", format=r"x")),
            rules=(CrossFieldRule(("a",), lambda v: False, "rule", "b"),),
        )
        assert validate(schema, {"b": "y"}).errors == {"b": "Invalid b"}


# =============================================================================
# Results
# =============================================================================


class TestResults:
    def test_valid_values_pass_through_untrimmed(self, valid_sign_up):
        valid_sign_up["firstName"] = "  Ada "
        valid_sign_up["password"] = " abcdefgh "
        valid_sign_up["confirmPassword"] = " abcdefgh "
        result = validate(sign_up_schema, valid_sign_up)

        assert isinstance(result, Valid)
        assert result.values["firstName"] == "  Ada "
        assert result.values["password"] == " abcdefgh "

    def test_valid_values_cover_every_field_and_ignore_extras(self):
        result = validate(sign_in_schema, {"email": "a@b.co", "password": "abcdefgh", "admin": True})
        assert dict(result.values) == {"email": "a@b.co", "password": "abcdefgh"}

    def test_error_keys_are_schema_fields(self):
        result = validate(sign_up_schema, {"bogus": "x", "terms": "maybe"})
        assert set(result.errors) <= set(sign_up_schema.field_names)

    def test_errors_follow_schema_order(self):
        result = validate(sign_up_schema, {})
        assert list(result.errors) == ["firstName", "lastName", "email", "password", "terms"]

    def test_exactly_one_variant_populated(self, valid_sign_up):
        valid = validate(sign_up_schema, valid_sign_up)
        invalid = validate(sign_up_schema, {})

        assert valid.values and not valid.errors
        assert invalid.errors and not invalid.values

    def test_results_are_read_only(self):
        result = validate(sign_in_schema, {})
        with pytest.raises(TypeError):
            result.errors["email"] = "changed"

    def test_validation_is_idempotent(self):
        raw = {"email": "nope", "password": "abc"}
        first = validate(sign_in_schema, raw)
        second = validate(sign_in_schema, raw)

        assert type(first) is type(second)
        assert dict(first.errors) == dict(second.errors) == {
            "email": "Invalid email address",
            "password": "Password must be at least 8 characters",
        }

    def test_input_not_mutated(self, valid_sign_up):
        snapshot = dict(valid_sign_up)
        validate(sign_up_schema, valid_sign_up)
        assert valid_sign_up == snapshot

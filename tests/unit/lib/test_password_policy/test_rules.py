"""Tests for the synchronous password composition rules."""

import pytest

from portal_api.lib.password_policy.rules import (
    LABEL_DIGIT,
    LABEL_LOWERCASE,
    LABEL_SEQUENTIAL,
    LABEL_SYMBOL,
    LABEL_UPPERCASE,
    check_password_rules,
    has_sequential_digits,
    length_label,
)

STRONG = "Tr4vel!Quokka#Blue"


class TestCheckPasswordRules:
    def test_strong_password_passes(self) -> None:
        assert check_password_rules(STRONG) == []

    @pytest.mark.parametrize(
        ("password", "missing"),
        [
            ("tr4vel!quokka#blue", LABEL_UPPERCASE),
            ("TR4VEL!QUOKKA#BLUE", LABEL_LOWERCASE),
            ("Travel!Quokka#Blue", LABEL_DIGIT),
            ("Tr4velXQuokkaYBlue", LABEL_SYMBOL),
            ("Tr4vel!Quokka#1234", LABEL_SEQUENTIAL),
        ],
    )
    def test_removing_one_property_reports_exactly_it(self, password: str, missing: str) -> None:
        assert check_password_rules(password) == [missing]

    def test_short_password_reports_length(self) -> None:
        assert check_password_rules("Tr4vel!Q") == [length_label(12)]

    def test_custom_min_length(self) -> None:
        assert check_password_rules(STRONG, min_length=20) == ["at least 20 characters"]

    def test_failures_in_fixed_order(self) -> None:
        assert check_password_rules("") == [
            "at least 12 characters",
            LABEL_UPPERCASE,
            LABEL_LOWERCASE,
            LABEL_DIGIT,
            LABEL_SYMBOL,
        ]

    @pytest.mark.parametrize("symbol", list('!@#$%^&*(),.?":{}|<>_+=-'))
    def test_every_listed_symbol_counts(self, symbol: str) -> None:
        assert LABEL_SYMBOL not in check_password_rules(f"Abcdefghij1{symbol}")

    def test_unlisted_symbol_does_not_count(self) -> None:
        assert LABEL_SYMBOL in check_password_rules("Abcdefghij1~")

    def test_non_ascii_letters_do_not_count_as_case(self) -> None:
        failures = check_password_rules("ÁÉÍÓÚáéíóú1!")
        assert LABEL_UPPERCASE in failures
        assert LABEL_LOWERCASE in failures


class TestSequentialDigits:
    @pytest.mark.parametrize("password", ["1234", "x6789y", "9876", "abc3210", "7890", "a7890b", "6543"])
    def test_runs_detected(self, password: str) -> None:
        assert has_sequential_digits(password)

    @pytest.mark.parametrize(
        "password", ["123", "1235", "1324", "12a34", "1111", "2468", "", "8901", "9012", "0987", "1098"]
    )
    def test_non_runs_ignored(self, password: str) -> None:
        assert not has_sequential_digits(password)

    def test_direction_change_resets_run(self) -> None:
        assert not has_sequential_digits("12321")

    def test_custom_run_length(self) -> None:
        assert has_sequential_digits("123", run_length=3)
        assert not has_sequential_digits("1234", run_length=5)

import pytest

from tripbudget.services.money import (
    BACKSPACE_KEY,
    CLEAR_KEY,
    MAX_KEYPAD_AMOUNT,
    append_keypad_input,
    format_amount,
    format_rate,
    parse_amount,
    round2,
    type_digit,
)


@pytest.mark.parametrize(
    "text, expected",
    [
        ("12,5", 12.5),
        ("12.5", 12.5),
        (" 1 234,75 ", 1234.75),
        ("1 000", 1000.0),
        ("0", 0.0),
        ("", None),
        (None, None),
        ("abc", None),
        ("1.2.3", None),
        ("1,2.3", None),
        ("-5", None),
        ("NaN", None),
    ],
)
def test_parse_amount(text, expected):
    assert parse_amount(text) == expected


def test_format_amount():
    assert format_amount(1234.5) == "1 234.5"
    assert format_amount(1000000) == "1 000 000"
    assert format_amount(12.345) == "12.35"
    assert format_amount(0) == "0"
    assert format_amount(-42.1) == "-42.1"


def test_format_rate_and_round2():
    assert format_rate(0.109345) == "0.1093"
    assert format_rate(0.109345, 3) == "0.109"
    assert round2(2.675) == 2.68


class TestCalculatorKeys:
    def press(self, *keys, start="0"):
        text = start
        for key in keys:
            text = append_keypad_input(text, key)
        return text

    def test_digits_replace_leading_zero(self):
        assert self.press("1", "2") == "12"

    def test_single_separator(self):
        assert self.press("1", ",", "5", ".", "2") == "1.52"

    def test_two_fraction_digits_max(self):
        assert self.press("3", ".", "1", "4", "1") == "3.14"

    def test_separator_first(self):
        assert self.press(".", "5") == "0.5"

    def test_backspace_and_clear(self):
        assert self.press("7", BACKSPACE_KEY) == "0"
        assert self.press("7", "8", BACKSPACE_KEY) == "7"
        assert self.press("9", "9", CLEAR_KEY) == "0"

    def test_unknown_key_ignored(self):
        assert self.press("4", "x") == "4"


class TestWidgetKeypad:
    def test_shifts_digits(self):
        amount = 0.0
        for d in (1, 2, 5):
            amount = type_digit(amount, d)
        assert amount == 125

    def test_stops_growing_at_limit(self):
        assert type_digit(MAX_KEYPAD_AMOUNT, 7) == MAX_KEYPAD_AMOUNT

    def test_rejects_non_digit(self):
        with pytest.raises(ValueError):
            type_digit(1, 10)

"""
Synthetic card numbers for test fixtures.

Generated FPANs start with the given BIN, are padded with random digits and
end in a Luhn check digit, so they pass the same format checks a real
card number would.
"""

import random


def luhn_check_digit(payload: str) -> int:
    """Return the digit that makes ``payload + digit`` Luhn-valid."""
    total = 0
    # Rightmost payload digit sits in a doubled position once the check digit is appended
    for index, char in enumerate(reversed(payload)):
        digit = int(char)
        if index % 2 == 0:
            digit *= 2
            if digit > 9:
                digit -= 9
        total += digit
    return (10 - total % 10) % 10


def is_luhn_valid(number: str) -> bool:
    """True when ``number`` is all digits and its last digit is a valid check digit."""
    if len(number) < 2 or not number.isdigit():
        return False
    return luhn_check_digit(number[:-1]) == int(number[-1])


def generate_fpan(card_bin: str, length: int = 16) -> str:
    """
    Generate a Luhn-valid FPAN that starts with ``card_bin``.

    Args:
        card_bin: Bank identification number (leading digits of the card).
        length: Total number of digits, 12 to 19.

    Raises:
        ValueError: If the BIN is not numeric or leaves no room for a check digit.
    """
    if not card_bin.isdigit():
        raise ValueError(f"BIN must be numeric, got {card_bin!r}")
    if not 12 <= length <= 19:
        raise ValueError(f"FPAN length must be between 12 and 19, got {length}")
    if len(card_bin) >= length:
        raise ValueError(f"BIN {card_bin} is too long for a {length}-digit FPAN")

    body = card_bin + "".join(str(random.randint(0, 9)) for _ in range(length - len(card_bin) - 1))
    return body + str(luhn_check_digit(body))

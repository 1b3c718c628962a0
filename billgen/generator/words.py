"""English words rendering for whole-number currency amounts."""

from __future__ import annotations

import re

from num2words import num2words

# num2words joins groups with commas and "and" ("one thousand, two hundred
# and five"); printed bills use the plain form.
_CONNECTORS = re.compile(r",| and(?= )")

# num2words spells English cardinals below one thousand centillion.
MAX_AMOUNT = 10**306


def number_to_words(number: int) -> str:
    """Convert a non-negative integer to lowercase English words.

    >>> number_to_words(0)
    'zero'
    >>> number_to_words(1021)
    'one thousand twenty-one'

    Raises:
        ValueError: For negative input or amounts from MAX_AMOUNT up
    """
    if number < 0:
        raise ValueError(f"Cannot convert negative amount {number} to words")
    if number >= MAX_AMOUNT:
        raise ValueError(f"Amount {number} is too large to write in words")
    words = _CONNECTORS.sub("", num2words(int(number), lang="en"))
    return " ".join(words.split())


def amount_in_words(amount: int | float, currency: str = "Rs.") -> str:
    """Render an amount in the printed currency phrase.

    Only the integral part of ``amount`` is rendered.

    >>> amount_in_words(100)
    '( Rs. One hundred only )'
    """
    words = number_to_words(int(amount))
    return f"( {currency} {words[0].upper()}{words[1:]} only )"

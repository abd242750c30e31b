import math

from ..exceptions import InvalidInputError


SUFFIX_MULTIPLIERS = {
    'k': 1_000,
    'm': 1_000_000,
    'b': 1_000_000_000,
}


def parse_budget(text):
    """
    Parse a compact currency amount such as ``"2.5m"`` or ``"1,000k"``.

    Suffixes ``k``, ``m`` and ``b`` are case-insensitive; commas are
    ignored.

    Parameters
    ----------
    text : str or number
        Raw budget as typed by the user.

    Returns
    -------
    float
        Amount in the market's base currency unit.

    Raises
    ------
    InvalidInputError
        When the amount is not a number or is not positive.

    Examples
    --------
    >>> parse_budget("2.5m")
    2500000.0
    >>> parse_budget("6B")
    6000000000.0
    """
    if isinstance(text, (int, float)) and not isinstance(text, bool):
        amount = float(text)
    else:
        cleaned = str(text or '').strip().lower().replace(',', '')
        multiplier = 1
        if cleaned and cleaned[-1] in SUFFIX_MULTIPLIERS:
            multiplier = SUFFIX_MULTIPLIERS[cleaned[-1]]
            cleaned = cleaned[:-1].strip()
        try:
            amount = float(cleaned) * multiplier
        except ValueError:
            raise InvalidInputError(f"Invalid budget amount: {text!r}")

    if not math.isfinite(amount) or amount <= 0:
        raise InvalidInputError(f"Budget must be a positive number, got {text!r}")
    return amount


def parse_item_count(value):
    """Parse a requested item count; must be a positive integer."""
    if isinstance(value, bool):
        raise InvalidInputError(f"Invalid number of items: {value!r}")
    try:
        count = int(str(value).strip())
    except (TypeError, ValueError):
        raise InvalidInputError(f"Invalid number of items: {value!r}")
    if count <= 0:
        raise InvalidInputError(f"Number of items must be positive, got {value!r}")
    return count

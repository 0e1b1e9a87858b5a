"""Index formatting for signature elements.

Pure functions turning a 1-based counter position into the display string
of a component's numbering scheme.
"""
from domain_models import IndexType
from errors import InvalidInputError

_ROMAN_NUMERALS = (
    (1000, 'M'), (900, 'CM'), (500, 'D'), (400, 'CD'),
    (100, 'C'), (90, 'XC'), (50, 'L'), (40, 'XL'),
    (10, 'X'), (9, 'IX'), (5, 'V'), (4, 'IV'), (1, 'I'),
)

ROMAN_MAX = 3999


def to_roman(position: int) -> str:
    """Classic additive/subtractive numerals.

    Positions beyond MMMCMXCIX are written as decimal text.
    """
    if position > ROMAN_MAX:
        return str(position)
    parts = []
    for value, numeral in _ROMAN_NUMERALS:
        count, position = divmod(position, value)
        parts.append(numeral * count)
    return ''.join(parts)


def to_alpha(position: int, upper: bool = False) -> str:
    """Bijective base-26: 1 -> a, 26 -> z, 27 -> aa"""
    base = ord('A') if upper else ord('a')
    chars = []
    while position > 0:
        position, remainder = divmod(position - 1, 26)
        chars.append(chr(base + remainder))
    return ''.join(reversed(chars))


def format_index(position: int, index_type) -> str:
    """Format a counter position using the component's numbering scheme.

    Args:
        position: 1-based counter value
        index_type: IndexType (or its string value)

    Raises:
        InvalidInputError: position < 1 or unknown scheme
    """
    if isinstance(position, bool) or not isinstance(position, int) or position < 1:
        raise InvalidInputError(f"Index position must be a positive integer, got {position!r}")

    scheme = IndexType.parse(index_type)
    if scheme is IndexType.DECIMAL:
        return str(position)
    if scheme is IndexType.ROMAN:
        return to_roman(position)
    if scheme is IndexType.LOWER_ALPHA:
        return to_alpha(position)
    if scheme is IndexType.UPPER_ALPHA:
        return to_alpha(position, upper=True)
    raise InvalidInputError(f"Unsupported index type: {scheme!r}")

"""
RUT (Rol Único Tributario) codec for Chile.

Strips, validates and formats Chilean national identification numbers using
the official módulo 11 check digit.

The implementation keeps an adapter seam so an external library (like
python-rut) can replace the built-in codec without touching callers.
"""

from typing import Any, Protocol

# Sentinel returned by format_rut() for absent input
RUT_NO_DISPONIBLE = "N/A"

# Bodies longer than this are assumed to carry a trailing check digit
MAX_BODY_WITHOUT_DV = 8

SEPARATORS = (".", "-")


class InvalidRUTError(ValueError):
    """Raised when a RUT body is empty or contains non-digit characters."""
    pass


class RUTAdapter(Protocol):
    """Protocol for pluggable RUT codecs."""

    def check_digit(self, body: str) -> str:
        """Compute the check character for a RUT body."""
        ...

    def format(self, rut: Any) -> str:
        """Render a RUT in display form (12.345.678-5)."""
        ...

    def validate(self, rut: Any) -> bool:
        """Check a RUT's trailing character against its body."""
        ...


def strip_rut(rut: Any) -> str:
    """
    Remove dots and hyphens from a RUT.

    Args:
        rut: RUT in any format, or None

    Returns:
        RUT without separators ("" for empty input)

    Examples:
        >>> strip_rut("12.345.678-5")
        '123456785'
        >>> strip_rut(None)
        ''
    """
    if rut is None or rut == "":
        return ""

    cleaned = str(rut)
    for separator in SEPARATORS:
        cleaned = cleaned.replace(separator, "")
    return cleaned


def sanitize_for_storage(rut: Any) -> str:
    """Canonical form sent to the API: digits and check character only."""
    return strip_rut(rut)


def _group_thousands(body: str) -> str:
    groups = []
    for end in range(len(body), 0, -3):
        groups.append(body[max(end - 3, 0):end])
    return ".".join(reversed(groups))


class DefaultRUTAdapter:
    """Built-in módulo 11 implementation."""

    def check_digit(self, body: str) -> str:
        """
        Calculate the check digit for a RUT body.

        The Chilean algorithm:
        1. Multiply each digit (from right to left) by sequence 2,3,4,5,6,7,2,3,4...
        2. Sum all products
        3. Calculate 11 - (sum % 11)
        4. If result is 11, DV is 0; if 10, DV is K; otherwise DV is the result

        Args:
            body: RUT body as a digit string

        Returns:
            Check character ('0'-'9' or 'K')

        Raises:
            InvalidRUTError: If body is empty or not numeric

        Examples:
            >>> DefaultRUTAdapter().check_digit("12345678")
            '5'
            >>> DefaultRUTAdapter().check_digit("1000005")
            'K'
        """
        body = str(body) if body is not None else ""
        if not body:
            raise InvalidRUTError("RUT body cannot be empty")
        if not (body.isascii() and body.isdigit()):
            raise InvalidRUTError(f"RUT body must be numeric: {body!r}")

        total = 0
        multiplier = 2

        for digit in reversed(body):
            total += int(digit) * multiplier
            multiplier = 2 if multiplier == 7 else multiplier + 1

        expected = 11 - (total % 11)

        if expected == 11:
            return "0"
        if expected == 10:
            return "K"
        return str(expected)

    def format(self, rut: Any) -> str:
        """
        Format a RUT as dot-grouped body, hyphen and recomputed check digit.

        Input longer than 8 characters (after stripping) is assumed to end
        with a check digit, which is discarded. Shorter input is taken as a
        bare body. The check digit is always recomputed from the body.

        Args:
            rut: Stored or typed RUT, with or without separators

        Returns:
            Display RUT like "12.345.678-5", or "N/A" for empty input

        Raises:
            InvalidRUTError: If the body is not numeric

        Examples:
            >>> DefaultRUTAdapter().format("123456785")
            '12.345.678-5'
            >>> DefaultRUTAdapter().format("")
            'N/A'
        """
        cleaned = strip_rut(rut)
        if not cleaned:
            return RUT_NO_DISPONIBLE

        body = cleaned[:-1] if len(cleaned) > MAX_BODY_WITHOUT_DV else cleaned
        dv = self.check_digit(body)

        return _group_thousands(body) + "-" + dv

    def validate(self, rut: Any) -> bool:
        """
        Validate a RUT's trailing check character.

        Args:
            rut: RUT string in any format (k and K are equivalent)

        Returns:
            True if the check character matches the body

        Examples:
            >>> DefaultRUTAdapter().validate("12.345.678-5")
            True
            >>> DefaultRUTAdapter().validate("12345678-K")
            False
        """
        cleaned = strip_rut(rut)
        if not cleaned:
            return False

        body, dv = cleaned[:-1], cleaned[-1].upper()

        try:
            return self.check_digit(body) == dv
        except InvalidRUTError:
            return False


# Global adapter instance (can be replaced with external library)
_adapter: RUTAdapter = DefaultRUTAdapter()


def set_adapter(adapter: RUTAdapter) -> None:
    """
    Set a custom RUT adapter.

    Args:
        adapter: Custom adapter implementing RUTAdapter protocol
    """
    global _adapter
    _adapter = adapter


def check_digit(body: str) -> str:
    """
    Compute the check digit of a RUT body.

    Raises:
        InvalidRUTError: If body is empty or not numeric
    """
    return _adapter.check_digit(body)


def format_rut(rut: Any) -> str:
    """
    Render a RUT for display.

    Examples:
        >>> format_rut("12345678-5")
        '12.345.678-5'
        >>> format_rut(None)
        'N/A'
    """
    return _adapter.format(rut)


def format_rut_body(body: Any) -> str:
    """
    Render a bare RUT body, which never carries a check digit, for display.

    Unlike format_rut, no trailing character is dropped whatever the length.

    Examples:
        >>> format_rut_body("76086428")
        '76.086.428-5'
        >>> format_rut_body("123456789")
        '123.456.789-2'
    """
    cleaned = strip_rut(body)
    if not cleaned:
        return RUT_NO_DISPONIBLE
    return _group_thousands(cleaned) + "-" + check_digit(cleaned)


def validate_rut(rut: Any) -> bool:
    """
    Validate a RUT using módulo 11. Never raises.

    Examples:
        >>> validate_rut("12.345.678-5")
        True
        >>> validate_rut("")
        False
    """
    return _adapter.validate(rut)

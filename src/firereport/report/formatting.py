"""Text formatting rules for the report paper.

These match the paper form exactly and must not change: times in 12-hour
``H:MM AM``, dates as ``DD-MM-YY``, description split over two lines.

Fields are free text, so input that does not look like a time or a date is
shown as typed rather than failing the whole preview.
"""


def format_time(value: str) -> str:
    """Format a 24-hour ``HH:MM`` time as ``H:MM AM/PM``.

    Hour 0 and hour 12 both display as 12. Empty input gives empty output.

    >>> format_time("13:30")
    '1:30 PM'
    """
    if not value:
        return ""
    hours_text, sep, minutes = value.partition(":")
    if not sep or not hours_text.strip().isdecimal():
        return value
    hours = int(hours_text)
    suffix = "PM" if hours >= 12 else "AM"
    hour12 = hours % 12 or 12
    return f"{hour12}:{minutes} {suffix}"


def format_date(value: str) -> str:
    """Format a ``YYYY-MM-DD`` date as ``DD-MM-YY``.

    The two-digit year is the last two characters of the year text.

    >>> format_date("2024-03-07")
    '07-03-24'
    """
    if not value:
        return ""
    parts = value.split("-", 2)
    if len(parts) != 3:
        return value
    year, month, day = parts
    return f"{day}-{month}-{year[-2:]}"


def description_lines(text: str) -> tuple[str, str]:
    """Split a description into the two paper lines.

    The first line break separates the lines; a missing second line is
    blank. Anything after a second line break does not fit on the paper.
    """
    lines = text.split("\n")
    first = lines[0]
    second = lines[1] if len(lines) > 1 else ""
    return first, second

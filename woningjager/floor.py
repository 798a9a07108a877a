"""Floor normalization for Dutch listings."""

import re

GROUND_FLOOR = "begane grond"

# House number followed by an apartment suffix: "12-3", "12 H", "12-hs", "12-iii"
APPENDIX_PATTERN = re.compile(r"[0-9]+[- ]+([1-9]|h|hs|i+)$", re.IGNORECASE)


def street_appendix(street: str | None) -> str | None:
    """Return the apartment suffix of a street address, if any."""
    if not street:
        return None
    match = APPENDIX_PATTERN.search(street.strip())
    return match.group(1) if match else None


def normalize_floor(floor: int | str | None, street: str | None = None) -> int | None:
    """
    Normalize a floor to an integer (0 is the ground floor).

    The published floor wins over the street suffix. Suffixes follow the
    Dutch convention: "h"/"hs" is the ground floor, a numeral or a run of
    "i" characters is the floor number.

    Args:
        floor: Floor as published by the site
        street: Street address, used when the floor is missing or unreadable

    Returns:
        Floor number, or None when unknown
    """
    if isinstance(floor, int) and not isinstance(floor, bool):
        return floor

    if isinstance(floor, str):
        value = floor.strip().lower()
        if value == GROUND_FLOOR:
            return 0
        if re.fullmatch(r"[0-9]+", value):
            return int(value)

    appendix = street_appendix(street)
    if appendix is None:
        return None

    appendix = appendix.lower()
    if appendix.isdigit():
        return int(appendix)
    if appendix in ("h", "hs"):
        return 0
    # run of "i"
    return len(appendix)

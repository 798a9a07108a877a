"""Interest areas: postcode to desirability (1-10)."""

import json
import logging
import re
from pathlib import Path
from types import MappingProxyType

logger = logging.getLogger(__name__)

# Amsterdam four-digit postcode areas
DEFAULT_AREAS = {
    1011: 9,  # Nieuwmarkt, Lastage
    1012: 7,  # Centrum, Wallen
    1013: 8,  # Haarlemmerbuurt, Westelijke Eilanden
    1014: 5,  # Houthavens, Spaarndammerbuurt
    1015: 10,  # Jordaan, Grachtengordel-West
    1016: 10,  # Grachtengordel-West
    1017: 9,  # Grachtengordel-Zuid
    1018: 9,  # Plantage, Oostelijke Eilanden
    1019: 7,  # Oostelijk Havengebied
    1051: 7,  # Staatsliedenbuurt
    1052: 8,  # Frederik Hendrikbuurt
    1053: 8,  # Oud-West
    1054: 9,  # Helmersbuurt, Vondelbuurt
    1055: 5,  # Bos en Lommer
    1056: 6,  # Baarsjes
    1057: 6,  # Overtoomse Sluis
    1058: 5,  # Hoofdweg
    1071: 9,  # Museumkwartier
    1072: 9,  # De Pijp
    1073: 9,  # De Pijp
    1074: 8,  # De Pijp, Rivierenbuurt
    1075: 8,  # Willemspark, Schinkelbuurt
    1076: 7,  # Stadionbuurt
    1077: 7,  # Apollobuurt, Zuidas
    1078: 7,  # Rivierenbuurt
    1079: 6,  # Rivierenbuurt
    1091: 8,  # Weesperzijde, Oosterpark
    1092: 7,  # Dapperbuurt, Oosterparkbuurt
    1093: 6,  # Dapperbuurt, Transvaalbuurt
    1094: 6,  # Indische Buurt
    1095: 5,  # Indische Buurt Oost
    1097: 6,  # Watergraafsmeer
    1098: 5,  # Science Park, Middenmeer
}


def load_areas(path: Path | None = None) -> MappingProxyType:
    """
    Load the area table.

    Args:
        path: Optional JSON file mapping postcodes to desirability,
            e.g. {"1011": 9}. Replaces the built-in table.

    Returns:
        Read-only mapping of postcode number to desirability
    """
    if path is None:
        return MappingProxyType(dict(DEFAULT_AREAS))

    data = json.loads(Path(path).read_text(encoding="utf-8"))
    areas = {int(code): int(rating) for code, rating in data.items()}
    logger.info("Loaded %d interest areas from %s", len(areas), path)
    return MappingProxyType(areas)


def postcode_number(zipcode: str | None) -> int | None:
    """Numeric part of a postcode: "1011 AB" -> 1011."""
    if not zipcode:
        return None
    match = re.match(r"\s*(\d+)", zipcode)
    return int(match.group(1)) if match else None


def desirability(areas, zipcode: str | None) -> int | None:
    """Desirability of a postcode, or None when it is not an interest area."""
    number = postcode_number(zipcode)
    if number is None:
        return None
    return areas.get(number)

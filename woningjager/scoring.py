"""Scoring and alert message assembly."""

import math

from pydantic import BaseModel, Field

from woningjager.models import AIProperties, Listing

EMOJIS = {
    1: "🤬",
    2: "😡",
    3: "😠",
    4: "😞",
    5: "😐",
    6: "🙂",
    7: "😊",
    8: "😃",
    9: "😍",
    10: "🥰",
}

HIGHLIGHT_SCORE = 7
HIGHLIGHT_BANNER = "🚨🚨🚨 Might be a good property!"
QUIET_AREA_MAX = 5


class Alert(BaseModel):
    """A notification ready to be delivered."""

    text: str
    images: list[str | bytes] = Field(default_factory=list)
    silent: bool = False
    score: int | None = None


def round_half_up(value: float) -> int:
    """Round .5 away from zero for positive values (1.5 -> 2, 2.5 -> 3)."""
    return math.floor(value + 0.5)


def passes_prefilter(area: int | None, meters: int | None, min_meters: int) -> bool:
    """
    Cheap eligibility check for AI enrichment and alerting.

    The postcode must be an interest area and the size, when known, must
    reach the minimum. A size of 0 counts as unknown.
    """
    if area is None:
        return False
    return not meters or meters >= min_meters


def floor_score(floor: int | None, ai: AIProperties | None) -> int:
    """Score outdoor space: ground floor with garden beats a roof terrace."""
    garden = bool(ai and ai.garden)
    rooftarrace = bool(ai and ai.rooftarrace)
    ground = floor == 0

    if ground and garden:
        return 10
    if rooftarrace:
        return 8
    if ground or garden:
        return 5
    return 0


def composite_score(area: int, floor_points: int, ai: AIProperties | None) -> int:
    """Average of area desirability, floor score and the AI rating (default 10, scaled /10)."""
    rating = (ai.rating if ai else None) or 10
    return round_half_up((area + floor_points + rating / 10) / 3)


def emoji(score: int | None) -> str:
    """Sentiment indicator for a 1-10 score; empty for a missing score."""
    if not score:
        return ""
    return EMOJIS.get(score, "")


def price_per_meter(price: int | None, meters: int | None) -> int | None:
    if not price or not meters:
        return None
    return round_half_up(price / meters)


def build_alert(
    listing: Listing,
    floor: int | None,
    area: int,
    ai: AIProperties | None = None,
) -> Alert:
    """
    Assemble the alert for a listing that passed the pre-filter.

    Args:
        listing: Enriched listing
        floor: Normalized floor
        area: Desirability of the listing's postcode
        ai: AI-derived attributes, if any

    Returns:
        Alert with Markdown text, the listing image and the silent flag
    """
    score = composite_score(area, floor_score(floor, ai), ai)
    ppm = price_per_meter(listing.price, listing.meters)

    parts = [
        f"{emoji(score)} {score}/10" if score else None,
        f"📍{area}/10",
        f"€{round_half_up(listing.price / 1000)}k" if listing.price else None,
        f"{listing.meters}m2" if listing.meters else None,
        f"€{ppm}/m2" if ppm else None,
        listing.street or None,
        f"🛗 {floor}" if floor else None,
        f"🛏 {ai.rooms}" if ai and ai.rooms else None,
        f"🧾 €{ai.servicecosts} p/m" if ai and ai.servicecosts else None,
    ]

    lines = [
        HIGHLIGHT_BANNER if score >= HIGHLIGHT_SCORE else None,
        " · ".join(part for part in parts if part),
        f"[{listing.url}]({listing.url})",
        f"_AI rating {ai.rating or 0}/100. {ai.reason}_" if ai and ai.reason else None,
    ]

    return Alert(
        text="\n".join(line for line in lines if line),
        images=[listing.image] if listing.image else [],
        silent=area <= QUIET_AREA_MAX,
        score=score,
    )

"""
Tests for the pure building blocks.

Covers:
- floor.py: floor normalization
- areas.py: interest areas
- scoring.py: pre-filter, scores and alert text
- models/listing.py: coercion and gap filling
- storage.py: build_record
- utils/helpers.py: parsing helpers
"""

import json

import pytest

from woningjager.areas import DEFAULT_AREAS, desirability, load_areas, postcode_number
from woningjager.floor import normalize_floor, street_appendix
from woningjager.models import AIProperties, Listing
from woningjager.scoring import (
    HIGHLIGHT_BANNER,
    build_alert,
    composite_score,
    emoji,
    floor_score,
    passes_prefilter,
    price_per_meter,
    round_half_up,
)
from woningjager.storage import build_record
from woningjager.utils.helpers import (
    clean_text,
    extract_number,
    parse_area,
    parse_price,
    split_postcode_city,
)


# =============================================================================
# FIXTURES
# =============================================================================

@pytest.fixture
def keizersgracht():
    """Listing in a 9/10 area, second floor."""
    return Listing(
        url="https://example.test/keizersgracht-10-2",
        street="Keizersgracht 10-2",
        zipcode="1011",
        meters=65,
        price=450000,
        platform="test",
    )


@pytest.fixture
def areas():
    return {1011: 9, 1055: 5, 1071: 8}


# =============================================================================
# TESTS: floor.py
# =============================================================================

class TestNormalizeFloor:
    """Tests of normalize_floor."""

    def test_begane_grond(self):
        """'begane grond' is the ground floor."""
        assert normalize_floor("begane grond") == 0

    def test_begane_grond_case_and_spaces(self):
        assert normalize_floor("  Begane Grond ") == 0

    def test_numeric_floor(self):
        assert normalize_floor("3") == 3

    def test_int_floor(self):
        assert normalize_floor(4) == 4

    def test_numeric_suffix(self):
        assert normalize_floor(None, "Hoofdstraat 12-3") == 3

    def test_h_suffix(self):
        assert normalize_floor(None, "Hoofdstraat 12-H") == 0

    def test_hs_suffix(self):
        assert normalize_floor(None, "Hoofdstraat 12-hs") == 0

    def test_roman_suffix(self):
        """A run of i's counts the floor."""
        assert normalize_floor(None, "Hoofdstraat 12-iii") == 3

    def test_space_separator(self):
        assert normalize_floor(None, "Hoofdstraat 12 2") == 2

    def test_no_suffix(self):
        assert normalize_floor(None, "Hoofdstraat 12") is None

    def test_no_floor_no_street(self):
        assert normalize_floor(None, None) is None

    def test_floor_field_wins_over_street(self):
        """Published floor takes precedence over the street suffix."""
        assert normalize_floor("5", "Hoofdstraat 12-2") == 5

    def test_unreadable_floor_falls_back_to_street(self):
        assert normalize_floor("derde verdieping", "Hoofdstraat 12-3") == 3

    def test_zero_suffix_not_matched(self):
        """Only 1-9 are apartment suffixes."""
        assert normalize_floor(None, "Hoofdstraat 12-0") is None

    def test_street_appendix(self):
        assert street_appendix("Keizersgracht 10-2") == "2"
        assert street_appendix("Keizersgracht 10") is None


# =============================================================================
# TESTS: areas.py
# =============================================================================

class TestAreas:
    """Tests of the interest area table."""

    def test_postcode_number(self):
        assert postcode_number("1011 AB") == 1011
        assert postcode_number("1011") == 1011
        assert postcode_number(None) is None
        assert postcode_number("AB") is None

    def test_desirability_known(self, areas):
        assert desirability(areas, "1011 AB") == 9

    def test_desirability_unknown(self, areas):
        assert desirability(areas, "9999") is None
        assert desirability(areas, None) is None

    def test_default_table(self):
        table = load_areas()
        assert table[1011] == DEFAULT_AREAS[1011]
        assert all(1 <= rating <= 10 for rating in table.values())

    def test_table_is_read_only(self):
        table = load_areas()
        with pytest.raises(TypeError):
            table[1011] = 1

    def test_load_from_file(self, tmp_path):
        path = tmp_path / "areas.json"
        path.write_text(json.dumps({"1234": 7}))

        table = load_areas(path)

        assert dict(table) == {1234: 7}


# =============================================================================
# TESTS: scoring.py
# =============================================================================

class TestPrefilter:
    """Tests of passes_prefilter."""

    def test_unknown_area_excluded(self):
        assert passes_prefilter(None, 80, 59) is False

    def test_small_excluded(self):
        assert passes_prefilter(9, 45, 59) is False

    def test_large_enough(self):
        assert passes_prefilter(9, 60, 59) is True

    def test_threshold_inclusive(self):
        assert passes_prefilter(9, 59, 59) is True

    def test_zero_size_counts_as_unknown(self):
        assert passes_prefilter(9, 0, 59) is True

    def test_unknown_size_eligible(self):
        assert passes_prefilter(9, None, 59) is True


class TestScores:
    """Tests of floor_score and composite_score."""

    def test_ground_floor_with_garden(self):
        assert floor_score(0, AIProperties(garden=True)) == 10

    def test_roof_terrace(self):
        assert floor_score(4, AIProperties(rooftarrace=True)) == 8

    def test_ground_floor_only(self):
        assert floor_score(0, None) == 5

    def test_garden_only(self):
        assert floor_score(2, AIProperties(garden=True)) == 5

    def test_nothing(self):
        assert floor_score(3, None) == 0
        assert floor_score(None, None) == 0

    def test_composite_default_rating(self):
        """Area 8 + floor 10 + absent rating (10/10) -> round(6.33) = 6."""
        ai = AIProperties(garden=True)
        assert composite_score(8, floor_score(0, ai), ai) == 6

    def test_composite_with_rating(self):
        assert composite_score(9, 10, AIProperties(rating=80)) == 9

    def test_zero_rating_counts_as_default(self):
        assert composite_score(9, 0, AIProperties(rating=0)) == 3

    def test_round_half_up(self):
        assert round_half_up(4.5) == 5
        assert round_half_up(2.5) == 3
        assert round_half_up(6.33) == 6

    def test_price_per_meter(self):
        assert price_per_meter(450000, 65) == 6923
        assert price_per_meter(None, 65) is None
        assert price_per_meter(450000, None) is None

    def test_emoji(self):
        assert emoji(10) == "🥰"
        assert emoji(3) == "😠"
        assert emoji(0) == ""
        assert emoji(None) == ""


class TestBuildAlert:
    """Tests of the alert text."""

    def test_full_line(self, keizersgracht):
        alert = build_alert(keizersgracht, 2, 9)

        assert alert.text.splitlines()[0] == (
            "😠 3/10 · 📍9/10 · €450k · 65m2 · €6923/m2 · Keizersgracht 10-2 · 🛗 2"
        )
        assert "[https://example.test/keizersgracht-10-2](https://example.test/keizersgracht-10-2)" in alert.text
        assert alert.silent is False
        assert alert.score == 3

    def test_missing_fields_omitted(self):
        listing = Listing(url="https://example.test/a", street="Somewhere 1", zipcode="1011")

        alert = build_alert(listing, None, 9)

        assert "€" not in alert.text
        assert "m2" not in alert.text
        assert "🛗" not in alert.text
        assert " ·  · " not in alert.text

    def test_ground_floor_not_shown(self, keizersgracht):
        assert "🛗" not in build_alert(keizersgracht, 0, 9).text

    def test_quiet_area_is_silent(self, keizersgracht):
        assert build_alert(keizersgracht, 2, 5).silent is True
        assert build_alert(keizersgracht, 2, 6).silent is False

    def test_banner_for_high_score(self, keizersgracht):
        ai = AIProperties(garden=True, rating=90)

        alert = build_alert(keizersgracht, 0, 10, ai)

        assert alert.score >= 7
        assert alert.text.splitlines()[0] == HIGHLIGHT_BANNER

    def test_no_banner_for_low_score(self, keizersgracht):
        assert HIGHLIGHT_BANNER not in build_alert(keizersgracht, 2, 9).text

    def test_ai_details(self, keizersgracht):
        ai = AIProperties(rooms=3, servicecosts=150, rating=72, reason="Sunny and quiet.")

        text = build_alert(keizersgracht, 2, 9, ai).text

        assert "🛏 3" in text
        assert "🧾 €150 p/m" in text
        assert text.endswith("_AI rating 72/100. Sunny and quiet._")

    def test_listing_image_attached(self, keizersgracht):
        keizersgracht.image = "https://example.test/photo.jpg"
        assert build_alert(keizersgracht, 2, 9).images == ["https://example.test/photo.jpg"]


# =============================================================================
# TESTS: models/listing.py
# =============================================================================

class TestListing:
    """Tests of the Listing model."""

    def test_price_from_text(self):
        assert Listing(url="u", price="€ 450.000 k.k.").price == 450000

    def test_empty_price(self):
        assert Listing(url="u", price="").price is None

    def test_meters_from_text(self):
        assert Listing(url="u", meters="65 m²").meters == 65
        assert Listing(url="u", meters=64.6).meters == 65

    def test_default_city(self):
        assert Listing(url="u").city == "Amsterdam"

    def test_zipcode_keeps_area_digits(self):
        assert Listing(url="u", zipcode="1015 AB").zipcode == "1015"
        assert Listing(url="u", zipcode="1015AB").zipcode == "1015"
        assert Listing(url="u", zipcode="1015").zipcode == "1015"

    def test_blank_zipcode(self):
        assert Listing(url="u", zipcode="  ").zipcode is None

    def test_fill_missing_only_fills_gaps(self):
        raw = Listing(url="https://a", price=300000, zipcode=None, street="Dam 1")
        other = Listing(url="https://b", price=1, zipcode="1012", meters=70, street="Other 2")

        merged = raw.fill_missing(other)

        assert merged.url == "https://a"
        assert merged.price == 300000
        assert merged.street == "Dam 1"
        assert merged.zipcode == "1012"
        assert merged.meters == 70


class TestAIProperties:
    """Tests of AIProperties coercion."""

    def test_rating_clamped(self):
        assert AIProperties(rating=150).rating == 100
        assert AIProperties(rating=-5).rating == 0

    def test_numbers_from_text(self):
        ai = AIProperties(servicecosts="€ 125", size="70")
        assert ai.servicecosts == 125
        assert ai.size == 70


# =============================================================================
# TESTS: storage.build_record
# =============================================================================

class TestBuildRecord:
    """Tests of build_record."""

    def test_raw_values_win(self, keizersgracht):
        ai = AIProperties(price=1, size=2, rooms=4, garden=True)

        record = build_record(keizersgracht, 2, ai)

        assert record["price"] == 450000
        assert record["meters"] == 65
        assert record["rooms"] == 4
        assert record["garden"] is True
        assert record["floor"] == 2

    def test_ai_fills_missing(self):
        listing = Listing(url="https://a", platform="test")

        record = build_record(listing, None, AIProperties(price=300000, size=70))

        assert record["price"] == 300000
        assert record["meters"] == 70

    def test_without_ai(self, keizersgracht):
        record = build_record(keizersgracht, 2, None)
        assert record["rating"] is None
        assert record["reason"] is None

    def test_binary_image_not_stored(self):
        listing = Listing(url="https://a", image=b"\x89PNG")
        assert build_record(listing, None, None)["image"] is None


# =============================================================================
# TESTS: utils/helpers.py
# =============================================================================

class TestHelpers:
    """Tests of the parsing helpers."""

    def test_parse_price(self):
        assert parse_price("€ 450.000 k.k.") == 450000
        assert parse_price("€ 1.250,50") == 1250
        assert parse_price("€ 375.000,-") == 375000
        assert parse_price("Prijs op aanvraag") is None
        assert parse_price(None) is None

    def test_parse_area(self):
        assert parse_area("65 m²") == 65
        assert parse_area("72,5 m2") == 72
        assert parse_area("3 kamers") is None

    def test_extract_number(self):
        assert extract_number("3 kamers") == 3
        assert extract_number("geen") is None

    def test_clean_text(self):
        assert clean_text("  Keizersgracht \n 10-2 ") == "Keizersgracht 10-2"
        assert clean_text("   ") is None

    def test_split_postcode_city(self):
        assert split_postcode_city("1015 AB Amsterdam (Jordaan)") == ("1015 AB", "Amsterdam")
        assert split_postcode_city("1015AB Amsterdam") == ("1015 AB", "Amsterdam")
        assert split_postcode_city("Amsterdam") == (None, "Amsterdam")
        assert split_postcode_city(None) == (None, None)


if __name__ == '__main__':
    pytest.main([__file__, '-v'])

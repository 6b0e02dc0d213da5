import pytest

from festival_core.parser import Region, calculate_duration, clean_plz, determine_region, extract_month, parse_number


class TestParseNumber:
    def test_thousands_separator(self) -> None:
        assert parse_number("10.000") == 10000
        assert parse_number("zirca 1.200.000") == 1200000

    def test_decimal_comma_rounds_half_up(self) -> None:
        assert parse_number("1,5") == 2
        assert parse_number("2,5") == 3
        assert parse_number("2,4") == 2

    def test_qualifier_and_unit(self) -> None:
        assert parse_number("ca. 500 Besucher") == 500
        assert parse_number("rund 2.500") == 2500
        assert parse_number("3 Tage") == 3
        assert parse_number("1,5 Mio.") == 2

    def test_range_average(self) -> None:
        assert parse_number("1000-2000") == 1500
        assert parse_number("10.000 – 20.000") == 15000
        assert parse_number("10000-15000 Besucher") == 12500

    def test_range_with_one_usable_side(self) -> None:
        assert parse_number("500-k.A.") == 500
        assert parse_number("-") == 0

    @pytest.mark.parametrize(
        "value",
        ["", "   ", None, "k.A.", "n/a", "N.A", "TBA", "abgesagt", "unbestimmt", "variiert stark", "nicht gefunden"],
    )
    def test_unknown_values_are_zero(self, value) -> None:
        assert parse_number(value) == 0

    def test_garbage_is_zero(self) -> None:
        assert parse_number("viele") == 0

    def test_numeric_input(self) -> None:
        assert parse_number(1500) == 1500
        assert parse_number(2.5) == 3
        assert parse_number(float("nan")) == 0

    def test_result_is_never_negative(self) -> None:
        assert parse_number("-5") == 5
        assert parse_number(-7) == 7


class TestExtractMonth:
    def test_range_uses_start_date(self) -> None:
        assert extract_month("01.07.2025-03.07.2025") == 7
        assert extract_month("30.06.2025 – 02.07.2025") == 6

    def test_month_names(self) -> None:
        assert extract_month("15. Juli") == 7
        assert extract_month("März 2026") == 3
        assert extract_month("Anfang Mai") == 5
        assert extract_month("Dezember") == 12
        assert extract_month("Okt. 2025") == 10

    def test_full_date(self) -> None:
        assert extract_month("15.08.2025") == 8
        assert extract_month("1.9.25") == 9

    def test_short_date_prefers_day_first(self) -> None:
        assert extract_month("03.04") == 4
        assert extract_month("04.13") == 4

    def test_bare_month_number(self) -> None:
        assert extract_month("6") == 6
        assert extract_month("13") == 0

    @pytest.mark.parametrize(
        "value",
        [None, "", "TBA", "t.b.a", "k.A.", "noch nicht bekannt", "Abgesagt 2025", "unbestimmt", "Sommer 2025"],
    )
    def test_unknown_values_are_zero(self, value) -> None:
        assert extract_month(value) == 0


class TestDetermineRegion:
    def test_berlin_override(self) -> None:
        assert determine_region("10115") == Region.OST
        assert determine_region("14467") == "Ost"
        assert determine_region("Berlin") == "Ost"
        assert determine_region("Berlin-Mitte") == "Ost"

    def test_first_digit(self) -> None:
        assert determine_region("04109") == "Ost"
        assert determine_region("20095") == "Nord"
        assert determine_region("50667") == "West"
        assert determine_region("80331") == "Süd"

    def test_non_digits_are_ignored(self) -> None:
        assert determine_region("D-12345") == "Ost"
        assert determine_region(" 30159 ") == "West"

    def test_unknown(self) -> None:
        assert determine_region("") == Region.UNKNOWN
        assert determine_region(None) == Region.UNKNOWN
        assert determine_region("München") == Region.UNKNOWN


class TestCalculateDuration:
    def test_range_counts_both_ends(self) -> None:
        assert calculate_duration("01.07.2025-03.07.2025") == 3
        assert calculate_duration("30.12.2025 – 02.01.2026") == 4

    def test_not_a_range(self) -> None:
        assert calculate_duration("15.08.2025") == 1
        assert calculate_duration("k.A.") == 1
        assert calculate_duration(None) == 1

    def test_invalid_dates(self) -> None:
        assert calculate_duration("31.02.2025-02.03.2025") == 1
        assert calculate_duration("Juli - August") == 1


def test_clean_plz() -> None:
    assert clean_plz("D-10 115") == "10115"
    assert clean_plz(None) == ""
    assert clean_plz("k.A.") == ""

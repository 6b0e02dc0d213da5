import pytest

from festival_core.parser import Region
from festival_core.plz_distance import (
    INDETERMINATE_DISTANCE,
    MAJOR_CITIES,
    calculate_city_distance,
    calculate_city_to_plz_distance,
    calculate_plz_distance,
    filter_by_proximity,
    find_city_by_name,
    find_city_by_plz,
    get_distance_class,
    get_distance_label,
    rank_by_proximity,
    radius_to_max_distance,
    resolve_reference_plz,
)


class TestCalculatePlzDistance:
    def test_same_prefix_is_very_close(self) -> None:
        assert calculate_plz_distance("10115", "10999") == 0

    def test_same_first_digit_is_close(self) -> None:
        assert calculate_plz_distance("40213", "47051") == 1

    def test_special_cases(self) -> None:
        assert calculate_plz_distance("01067", "04109") == 1
        assert calculate_plz_distance("99084", "04109") == 2
        assert calculate_plz_distance("40213", "50667") == 1
        assert calculate_plz_distance("20095", "30159") == 2

    def test_difference_steps(self) -> None:
        assert calculate_plz_distance("39104", "40213") == 2
        assert calculate_plz_distance("10115", "20095") == 3
        assert calculate_plz_distance("01067", "80331") == 4

    @pytest.mark.parametrize(
        ("plz_a", "plz_b"),
        [("01067", "04109"), ("39104", "40213"), ("10115", "80331"), ("44135", "45127")],
    )
    def test_symmetric(self, plz_a: str, plz_b: str) -> None:
        assert calculate_plz_distance(plz_a, plz_b) == calculate_plz_distance(plz_b, plz_a)

    def test_missing_input_is_indeterminate(self) -> None:
        assert calculate_plz_distance("", "10115") == INDETERMINATE_DISTANCE
        assert calculate_plz_distance("10115", None) == INDETERMINATE_DISTANCE
        assert calculate_plz_distance("k.A.", "10115") == 999

    def test_input_is_cleaned(self) -> None:
        assert calculate_plz_distance("D-10115", " 10999 ") == 0


class TestRadiusAndLabels:
    def test_radius_to_max_distance(self) -> None:
        assert radius_to_max_distance(5) == 0
        assert radius_to_max_distance(20) == 0
        assert radius_to_max_distance(21) == 1
        assert radius_to_max_distance(50) == 1
        assert radius_to_max_distance(200) == 1

    def test_labels(self) -> None:
        assert get_distance_label(0) == "Sehr nah (0-20km)"
        assert get_distance_label(1) == "Nah (20-50km)"
        assert get_distance_label(2) == "Außerhalb des Suchradius"
        assert get_distance_label(999) == "Außerhalb des Suchradius"

    def test_classes(self) -> None:
        assert get_distance_class(0) == "very-close"
        assert get_distance_class(1) == "close"
        assert get_distance_class(4) == "far"


class TestMajorCities:
    def test_table_size(self) -> None:
        assert len(MAJOR_CITIES) == 25

    def test_find_by_name(self) -> None:
        assert find_city_by_name("münchen").primary_plz == "80331"
        assert find_city_by_name(" Leipzig ").region == Region.OST
        assert find_city_by_name("Hamburg-Altona").name == "Hamburg"
        assert find_city_by_name("Bielefeld") is None
        assert find_city_by_name("") is None

    def test_find_by_plz(self) -> None:
        assert find_city_by_plz("14467").name == "Potsdam"
        assert find_city_by_plz("14469").name == "Berlin"
        assert find_city_by_plz("04229").name == "Leipzig"
        assert find_city_by_plz("33602") is None
        assert find_city_by_plz("") is None

    def test_city_distances(self) -> None:
        assert calculate_city_distance("Dresden", "Leipzig") == 1
        assert calculate_city_distance("Köln", "Köln") == 0
        assert calculate_city_distance("Köln", "Bielefeld") == INDETERMINATE_DISTANCE
        assert calculate_city_to_plz_distance("Düsseldorf", "50667") == 1
        assert calculate_city_to_plz_distance("Atlantis", "50667") == INDETERMINATE_DISTANCE

    def test_resolve_reference_plz(self) -> None:
        assert resolve_reference_plz("40213") == "40213"
        assert resolve_reference_plz("Köln") == "50667"
        assert resolve_reference_plz("Bielefeld") == ""
        assert resolve_reference_plz(None) == ""


class TestProximity:
    def test_rank_keeps_records_in_range_nearest_first(self, create_festival) -> None:
        festivals = [
            create_festival(1, plz="47051", location="Duisburg"),
            create_festival(2, plz="40213", location="Düsseldorf"),
            create_festival(3, plz="80331", location="München"),
            create_festival(4, plz="", location="Irgendwo"),
            create_festival(5, plz="40477", location="Düsseldorf"),
        ]

        ranked = rank_by_proximity(festivals, "40210", radius_km=50)

        assert [(festival.id, distance) for festival, distance in ranked] == [(2, 0), (5, 0), (1, 1)]

    def test_small_radius_keeps_same_prefix_only(self, create_festival) -> None:
        festivals = [create_festival(1, plz="47051"), create_festival(2, plz="40213")]

        result = filter_by_proximity(festivals, "40210", radius_km=20)

        assert [festival.id for festival in result] == [2]

    def test_city_name_reference(self, create_festival) -> None:
        festivals = [create_festival(1, plz="50667", location="Köln"), create_festival(2, plz="80331")]

        result = filter_by_proximity(festivals, "Köln", radius_km=10)

        assert [festival.id for festival in result] == [1]

    def test_unresolvable_reference_matches_location(self, create_festival) -> None:
        festivals = [
            create_festival(1, plz="33602", location="Bielefeld"),
            create_festival(2, plz="33602", location="Gütersloh"),
        ]

        result = filter_by_proximity(festivals, "bielefeld", radius_km=20)

        assert [festival.id for festival in result] == [1]

    def test_empty_reference_returns_everything(self, create_festival) -> None:
        festivals = [create_festival(1), create_festival(2)]

        assert filter_by_proximity(festivals, "  ", radius_km=20) == festivals

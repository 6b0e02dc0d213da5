import pytest

from festival_api import create_app

FESTIVALS_CSV = (
    "Name,Ort,PLZ,Datum,Genre,Besucher\n"
    "Festival A,City A,12345,01.07.2025-03.07.2025,Rock,1000\n"
    "Hannover Open,Hannover,30159,15.08.2025,Techno,ca. 20.000\n"
    "Hildesheim Beats,Hildesheim,31134,16.08.2025,House,5000\n"
    "Isar Klang,München,80331,TBA,Jazz,k.A.\n"
)

CITY_FESTIVALS_CSV = (
    "Bundesland,Stadt,PLZ (Veranstaltungsort),Festname,Datum (2025/2026),"
    "Besucheranzahl (geschätzt),Anmerkungen\n"
    "Sachsen,Leipzig,04109,Leipziger Markttage,12.09.2025 - 14.09.2025,ca. 100.000,Großer Markt\n"
    "Niedersachsen,Hannover,30159,Altstadtfest,01.08.2025,50.000,Historische Altstadt\n"
)

SALES_REPS_CSV = "PLZ,Ort,BezWertH\n300-399,Hannover,111\n8*,München,112\n"


@pytest.fixture
def app(tmp_path, make_config):
    festivals = tmp_path / "festivals.csv"
    festivals.write_text(FESTIVALS_CSV, encoding="utf-8")
    city_festivals = tmp_path / "cityfestivals.csv"
    city_festivals.write_text(CITY_FESTIVALS_CSV, encoding="utf-8")
    sales_reps = tmp_path / "plz-liste.csv"
    sales_reps.write_text(SALES_REPS_CSV, encoding="utf-8")

    config = make_config(
        festivals_source=str(festivals),
        city_festivals_source=str(city_festivals),
        sales_reps_source=str(sales_reps),
    )
    return create_app("testing", core_config=config)


@pytest.fixture
def client(app):
    return app.test_client()


class TestFestivalsEndpoint:
    def test_lists_festivals(self, client) -> None:
        response = client.get("/api/festivals")

        assert response.status_code == 200
        festivals = response.get_json()["festivals"]
        assert [festival["name"] for festival in festivals] == [
            "Festival A",
            "Hannover Open",
            "Hildesheim Beats",
            "Isar Klang",
        ]
        assert festivals[0]["region"] == "Ost"
        assert festivals[0]["festival_type"] == "Rock/Metal"

    def test_filter_by_sales_rep(self, client) -> None:
        response = client.get("/api/festivals?rep=111")

        names = [festival["name"] for festival in response.get_json()["festivals"]]
        assert names == ["Hannover Open", "Hildesheim Beats"]

    def test_unknown_sales_rep(self, client) -> None:
        response = client.get("/api/festivals?rep=999")

        assert response.status_code == 400
        assert "999" in response.get_json()["error"]

    def test_proximity_search(self, client) -> None:
        response = client.get("/api/festivals?near=30159&radius=10")

        names = [festival["name"] for festival in response.get_json()["festivals"]]
        assert names == ["Hannover Open"]

    def test_proximity_search_by_city(self, client) -> None:
        response = client.get("/api/festivals?near=Hannover&radius=50")

        names = [festival["name"] for festival in response.get_json()["festivals"]]
        assert names == ["Hannover Open", "Hildesheim Beats"]

    def test_invalid_radius(self, client) -> None:
        assert client.get("/api/festivals?near=30159&radius=abc").status_code == 400
        assert client.get("/api/festivals?near=30159&radius=0").status_code == 400

    def test_dashboard_filters(self, client) -> None:
        response = client.get("/api/festivals?region=West&month=8&hideEmpty=1")

        names = [festival["name"] for festival in response.get_json()["festivals"]]
        assert names == ["Hannover Open", "Hildesheim Beats"]

    def test_plz_filter(self, client) -> None:
        by_prefix = client.get("/api/festivals?plz=80")
        by_range = client.get("/api/festivals?plz=30000-30200")

        assert [f["name"] for f in by_prefix.get_json()["festivals"]] == ["Isar Klang"]
        assert [f["name"] for f in by_range.get_json()["festivals"]] == ["Hannover Open"]

    def test_invalid_plz_filter(self, client) -> None:
        response = client.get("/api/festivals?plz=4a")

        assert response.status_code == 400
        assert "nur Ziffern" in response.get_json()["error"]

    def test_upstream_failure(self, app, client, make_config, tmp_path) -> None:
        app.config["FESTIVAL_CONFIG"] = make_config(festivals_source=str(tmp_path / "fehlt.csv"))

        response = client.get("/api/festivals")

        assert response.status_code == 500
        body = response.get_json()
        assert body["error"] == "Failed to process festival data"
        assert body["details"].startswith("Failed to fetch CSV")


class TestCityFestivalsEndpoint:
    def test_lists_city_festivals(self, client) -> None:
        response = client.get("/api/cityfestivals")

        city_festivals = response.get_json()["cityFestivals"]
        assert [city_festival["fest_name"] for city_festival in city_festivals] == [
            "Leipziger Markttage",
            "Altstadtfest",
        ]
        assert city_festivals[0]["event_type"] == "Marktfest"
        assert city_festivals[1]["event_type"] == "Historisches Stadtfest"

    def test_type_filter(self, client) -> None:
        response = client.get("/api/cityfestivals?type=Marktfest")

        assert len(response.get_json()["cityFestivals"]) == 1


class TestSalesRepsEndpoint:
    def test_counts_festivals(self, client) -> None:
        response = client.get("/api/sales-reps")

        reps = {rep["id"]: rep for rep in response.get_json()["salesReps"]}
        assert reps["111"]["event_count"] == 2
        assert reps["112"]["event_count"] == 1
        assert reps["113"]["event_count"] == 0
        assert reps["111"]["plz_areas"] == ["300-399"]

    def test_counts_both_datasets(self, client) -> None:
        response = client.get("/api/sales-reps?type=both")

        reps = {rep["id"]: rep for rep in response.get_json()["salesReps"]}
        assert reps["111"]["event_count"] == 3

    def test_invalid_type(self, client) -> None:
        assert client.get("/api/sales-reps?type=alles").status_code == 400


class TestStatsEndpoint:
    def test_stats(self, client) -> None:
        response = client.get("/api/stats")

        stats = response.get_json()
        assert stats["total_festivals"] == 4
        assert stats["region_distribution"]["West"] == 2
        assert stats["festivals_with_visitor_count"] == 3


class TestPlzEndpoint:
    def test_plz_info(self, client) -> None:
        response = client.get("/api/plz/04109")

        assert response.get_json() == {"plz": "04109", "region": "Ost", "city": "Leipzig"}

    def test_distance_to_reference(self, client) -> None:
        body = client.get("/api/plz/04109?ref=01067").get_json()

        assert body["distance"] == 1
        assert body["distance_label"] == "Nah (20-50km)"
        assert body["distance_class"] == "close"


class TestCommands:
    def test_check_plz(self, app) -> None:
        result = app.test_cli_runner().invoke(args=["check-plz", "10115", "--ref", "14467"])

        assert result.exit_code == 0
        assert "Region:  Ost" in result.output
        assert "Stadt:   Berlin" in result.output
        assert "Distanz zu 14467: 1" in result.output

    def test_show_sales_reps(self, app) -> None:
        result = app.test_cli_runner().invoke(args=["show-sales-reps"])

        assert result.exit_code == 0
        assert "111  Mitarbeiter 111  (1 Gebiete): 300-399" in result.output

"""API Blueprint.

JSON endpoints for the festival dashboard.
"""

from __future__ import annotations

import logging

from flask import Blueprint, jsonify, request

from festival_api.services.dataset_service import DatasetService
from festival_core.loader import UpstreamFetchError
from festival_core.parser import determine_region
from festival_core.plz_distance import (
    calculate_plz_distance,
    filter_by_proximity,
    find_city_by_plz,
    get_distance_class,
    get_distance_label,
)
from festival_core.plz_filter import matches_filter, parse_plz_filter
from festival_core.sales_reps import count_events_per_sales_rep, find_sales_rep, sales_rep_predicate
from festival_core.stats import calculate_stats, filter_events, find_visitor_range

logger = logging.getLogger(__name__)

api_bp = Blueprint("api", __name__, url_prefix="/api")

EVENT_TYPE_FILTERS = {"festivals", "cityFestivals", "both"}
DEFAULT_RADIUS_KM = 20.0


class BadRequest(Exception):
    pass


def _upstream_error(label: str, error: UpstreamFetchError):
    logger.error("Fehler beim Laden der %s: %s", label, error)
    return jsonify({"error": f"Failed to process {label}", "details": str(error)}), 500


def _apply_dashboard_filters(records: list) -> list:
    """Apply ``region``, ``month``, ``type``, ``visitors``, ``search``, ``hideEmpty`` and ``plz``."""
    month = None
    raw_month = request.args.get("month", "").strip()
    if raw_month:
        try:
            month = int(raw_month)
        except ValueError:
            raise BadRequest("month muss eine Zahl sein")

    visitor_range = None
    visitors_label = request.args.get("visitors", "").strip()
    if visitors_label:
        visitor_range = find_visitor_range(visitors_label)
        if visitor_range is None:
            raise BadRequest(f"Unbekannte Besucherklasse: {visitors_label}")

    records = filter_events(
        records,
        region=request.args.get("region") or None,
        month=month,
        event_type=request.args.get("type") or None,
        visitor_range=visitor_range,
        search=request.args.get("search") or None,
        hide_empty=request.args.get("hideEmpty", "").lower() in ("1", "true"),
    )

    plz_value = request.args.get("plz", "").strip()
    if plz_value:
        try:
            plz_filter = parse_plz_filter(plz_value)
        except ValueError as e:
            raise BadRequest(str(e))
        records = [record for record in records if record.plz and matches_filter(record.plz, plz_filter)]

    return records


def _apply_filters(records: list) -> list:
    """Apply the dashboard filters plus ``rep``, ``near`` and ``radius``."""
    records = _apply_dashboard_filters(records)

    rep_id = request.args.get("rep", "").strip()
    if rep_id:
        rep = find_sales_rep(DatasetService.sales_reps(), rep_id)
        if rep is None:
            raise BadRequest(f"Unbekannter Vertriebsmitarbeiter: {rep_id}")
        records = list(filter(sales_rep_predicate(rep), records))

    near = request.args.get("near", "").strip()
    if near:
        try:
            radius = float(request.args.get("radius", DEFAULT_RADIUS_KM))
        except ValueError:
            raise BadRequest("radius muss eine Zahl sein")
        if radius <= 0:
            raise BadRequest("radius muss groesser als 0 sein")
        records = filter_by_proximity(records, near, radius)

    return records


@api_bp.errorhandler(BadRequest)
def handle_bad_request(error: BadRequest):
    return jsonify({"error": str(error)}), 400


@api_bp.route("/festivals", methods=["GET"])
def list_festivals():
    """All festivals, optionally filtered by territory and proximity."""
    try:
        festivals = _apply_filters(DatasetService.festivals())
    except UpstreamFetchError as e:
        return _upstream_error("festival data", e)

    return jsonify({"festivals": [festival.to_dict() for festival in festivals]})


@api_bp.route("/cityfestivals", methods=["GET"])
def list_city_festivals():
    """All city festivals, optionally filtered by territory and proximity."""
    try:
        city_festivals = _apply_filters(DatasetService.city_festivals())
    except UpstreamFetchError as e:
        return _upstream_error("city festival data", e)

    return jsonify({"cityFestivals": [city_festival.to_dict() for city_festival in city_festivals]})


@api_bp.route("/sales-reps", methods=["GET"])
def list_sales_reps():
    """Sales representatives with the number of events in their territory."""
    event_type = request.args.get("type", "festivals")
    if event_type not in EVENT_TYPE_FILTERS:
        raise BadRequest(f"type muss einer von {sorted(EVENT_TYPE_FILTERS)} sein")

    try:
        reps = DatasetService.sales_reps()
        events: list = []
        if event_type in ("festivals", "both"):
            events.extend(DatasetService.festivals())
        if event_type in ("cityFestivals", "both"):
            events.extend(DatasetService.city_festivals())
    except UpstreamFetchError as e:
        return _upstream_error("sales rep data", e)

    counts = count_events_per_sales_rep(events, reps)
    return jsonify({
        "salesReps": [{**rep.to_dict(), "event_count": counts.get(rep.id, 0)} for rep in reps],
    })


@api_bp.route("/stats", methods=["GET"])
def festival_stats():
    """Dashboard statistics over the (filtered) festivals."""
    try:
        festivals = _apply_filters(DatasetService.festivals())
    except UpstreamFetchError as e:
        return _upstream_error("festival data", e)

    return jsonify(calculate_stats(festivals).to_dict())


@api_bp.route("/plz/<plz>", methods=["GET"])
def plz_info(plz: str):
    """Region and reference city of a PLZ, plus the distance to ``ref`` if given."""
    city = find_city_by_plz(plz)
    result = {
        "plz": plz,
        "region": determine_region(plz).value,
        "city": city.name if city else None,
    }

    ref = request.args.get("ref", "").strip()
    if ref:
        distance = calculate_plz_distance(ref, plz)
        result.update({
            "ref": ref,
            "distance": distance,
            "distance_label": get_distance_label(distance),
            "distance_class": get_distance_class(distance),
        })

    return jsonify(result)

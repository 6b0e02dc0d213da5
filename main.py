from __future__ import annotations

import argparse
import asyncio
import json
import logging
from dataclasses import replace

from dotenv import load_dotenv

from festival_core.config import Config, load_config
from festival_core.geocoding import GeocodeCache
from festival_core.loader import (
    UpstreamFetchError,
    load_city_festivals,
    load_festivals,
    load_sales_representatives,
)
from festival_core.plz_distance import (
    calculate_plz_distance,
    filter_by_proximity,
    get_distance_label,
    resolve_reference_plz,
)
from festival_core.sales_reps import count_events_per_sales_rep, find_sales_rep, sales_rep_predicate
from festival_core.stats import calculate_stats

DATASETS = ("festivals", "cityfestivals", "salesreps")


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Festival Radar - CSV-Import und Auswertung")
    parser.add_argument("dataset", choices=DATASETS, help="Zu ladender Datensatz")
    parser.add_argument("--source", type=str, help="CSV-Quelle (URL oder Pfad) fuer den Datensatz")
    parser.add_argument("--sales-reps-source", type=str, help="CSV-Quelle der PLZ-Liste")
    parser.add_argument("--near", type=str, help="Umkreissuche: PLZ oder Stadt")
    parser.add_argument("--radius", type=float, default=20.0, help="Suchradius in km (max. 50)")
    parser.add_argument("--rep", type=str, help="Nur Events im Gebiet dieses Vertriebsmitarbeiters")
    parser.add_argument("--stats", action="store_true", help="Statistiken statt Einzel-Events ausgeben")
    parser.add_argument("--json", action="store_true", help="Ausgabe als JSON")
    parser.add_argument("--no-geocoding", action="store_true", help="Keine Koordinaten abfragen")
    parser.add_argument("--log-level", type=str, help="Log-Level (DEBUG, INFO, ...)")
    return parser.parse_args()


def build_config(args: argparse.Namespace) -> Config:
    config = load_config()

    if args.source:
        if args.dataset == "festivals":
            config = replace(config, festivals_source=args.source)
        elif args.dataset == "cityfestivals":
            config = replace(config, city_festivals_source=args.source)
        else:
            config = replace(config, sales_reps_source=args.source)
    if args.sales_reps_source:
        config = replace(config, sales_reps_source=args.sales_reps_source)
    if args.no_geocoding:
        config = replace(config, geocoding_enabled=False)
    if args.log_level:
        config = replace(config, log_level=args.log_level.upper())

    return config


def setup_logging(level: str) -> None:
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


async def run_sales_reps(args: argparse.Namespace, config: Config, cache: GeocodeCache) -> None:
    reps = await load_sales_representatives(config)
    festivals = await load_festivals(config, cache)
    counts = count_events_per_sales_rep(festivals, reps)

    if args.json:
        payload = [{**rep.to_dict(), "event_count": counts.get(rep.id, 0)} for rep in reps]
        print(json.dumps(payload, ensure_ascii=False, indent=2))
        return

    for rep in reps:
        print(f"{rep.id:>4}  {rep.name:<16} {len(rep.plz_areas):>4} Gebiete  {counts.get(rep.id, 0):>4} Events")


async def run_events(args: argparse.Namespace, config: Config, cache: GeocodeCache) -> None:
    if args.dataset == "festivals":
        records = await load_festivals(config, cache)
    else:
        records = await load_city_festivals(config, cache)
    logging.info("%s Events geladen", len(records))

    if args.rep:
        reps = await load_sales_representatives(config)
        rep = find_sales_rep(reps, args.rep)
        if rep is None:
            raise ValueError(f"Unbekannter Vertriebsmitarbeiter: {args.rep}")
        records = list(filter(sales_rep_predicate(rep), records))
        logging.info("%s Events im Gebiet von %s", len(records), rep.name)

    reference_plz = ""
    if args.near:
        records = filter_by_proximity(records, args.near, args.radius)
        reference_plz = resolve_reference_plz(args.near)
        logging.info("%s Events im Umkreis von %s km um %s", len(records), args.radius, args.near)

    if args.stats:
        if args.dataset != "festivals":
            raise ValueError("Statistiken gibt es nur fuer Festivals")
        stats = calculate_stats(records)
        print(json.dumps(stats.to_dict(), ensure_ascii=False, indent=2))
        return

    if args.json:
        print(json.dumps([record.to_dict() for record in records], ensure_ascii=False, indent=2))
        return

    for record in records:
        line = f"[{record.id:>3}] {record.name} - {record.plz or '-'} {record.location} ({record.region.value})"
        if reference_plz:
            distance = calculate_plz_distance(reference_plz, record.plz)
            line += f" - {get_distance_label(distance)}"
        print(line)


def main() -> None:
    args = parse_args()
    load_dotenv()
    config = build_config(args)
    setup_logging(config.log_level)

    if args.radius <= 0:
        raise SystemExit("Der Suchradius muss groesser als 0 sein")

    cache = GeocodeCache()
    try:
        if args.dataset == "salesreps":
            asyncio.run(run_sales_reps(args, config, cache))
        else:
            asyncio.run(run_events(args, config, cache))
    except UpstreamFetchError as e:
        logging.error("Datensatz konnte nicht geladen werden: %s", e)
        raise SystemExit(1)
    except ValueError as e:
        raise SystemExit(str(e))

    logging.info("%s Adressen im Geocode-Cache", len(cache))


if __name__ == "__main__":
    main()

"""Flask CLI Commands.

Operator commands for checking territories and postal codes.
"""

from __future__ import annotations

import click
from flask import Flask
from flask.cli import with_appcontext

from festival_api.services.dataset_service import DatasetService
from festival_core.loader import UpstreamFetchError
from festival_core.parser import determine_region
from festival_core.plz_distance import calculate_plz_distance, find_city_by_plz, get_distance_label


def register_commands(app: Flask):
    """Register all CLI commands with the Flask app."""
    app.cli.add_command(show_sales_reps_command)
    app.cli.add_command(check_plz_command)


@click.command("show-sales-reps")
@with_appcontext
def show_sales_reps_command():
    """List sales representatives and their PLZ areas."""
    try:
        reps = DatasetService.sales_reps()
    except UpstreamFetchError as e:
        raise click.ClickException(str(e))

    if not reps:
        click.echo("Keine Vertriebsmitarbeiter gefunden.")
        return

    for rep in reps:
        areas = ", ".join(rep.plz_areas) if rep.plz_areas else "-"
        click.echo(f"{rep.id}  {rep.name}  ({len(rep.plz_areas)} Gebiete): {areas}")


@click.command("check-plz")
@click.argument("plz")
@click.option("--ref", default=None, help="Referenz-PLZ fuer die Entfernungsstufe")
@with_appcontext
def check_plz_command(plz: str, ref: str | None):
    """Show region and reference city for PLZ.

    PLZ: Postal code to check (e.g. 10115)
    """
    city = find_city_by_plz(plz)
    click.echo(f"PLZ:     {plz}")
    click.echo(f"Region:  {determine_region(plz).value}")
    click.echo(f"Stadt:   {city.name if city else '-'}")

    if ref:
        distance = calculate_plz_distance(ref, plz)
        click.echo(f"Distanz zu {ref}: {distance} ({get_distance_label(distance)})")

#!/usr/bin/env python3
"""
CLI script to seed the database with demo sites and readings.

Usage:
    # Basic seeding
    python scripts/seed_database.py

    # Clear existing data before seeding
    python scripts/seed_database.py --clear

    # Create sites only
    python scripts/seed_database.py --skip-readings

    # Apply migrations first
    python scripts/seed_database.py --migrate

    # Using uv
    uv run python scripts/seed_database.py --clear
"""

import argparse
import asyncio
import logging
import os
import sys

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from methane_tracker.core.config import get_config
from methane_tracker.database.base import apply_db_migration, engine_kw, get_db_url
from methane_tracker.database.repositories import SiteRepository
from methane_tracker.database.session_manager.db_session import Database
from methane_tracker.services.compliance import get_compliance_status
from methane_tracker.services.seed_database import DatabaseSeeder
from methane_tracker.utils.constants import ComplianceStatus

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

console = Console()


def print_header(text: str, style: str = "bold cyan"):
    """Print a formatted header using Rich Panel."""
    console.print(
        Panel(
            Text(text, justify="center", style=style),
            border_style="cyan",
            padding=(1, 2),
        )
    )


def print_config(args):
    """Print configuration details."""
    config_table = Table(show_header=False, box=None, padding=(0, 2))
    config_table.add_column("Setting", style="bold yellow")
    config_table.add_column("Value", style="green")

    config_table.add_row("Config File", args.config)
    config_table.add_row("Apply Migrations", "Yes" if args.migrate else "No")
    config_table.add_row("Clear Existing", "Yes" if args.clear else "No")
    config_table.add_row("Skip Readings", "Yes" if args.skip_readings else "No")

    console.print(config_table)
    console.print()


def print_stats(stats: dict):
    """Print seeding statistics using Rich Table."""
    print_header("SEEDING STATISTICS", "bold green")

    stats_table = Table(show_header=True, box=None, padding=(0, 2))
    stats_table.add_column("Category", style="bold cyan", width=30)
    stats_table.add_column("Count", justify="right", style="bold green")

    stats_table.add_row("Sites", str(stats["sites"]))
    stats_table.add_row("Batches Ingested", str(stats["batches_ingested"]))
    stats_table.add_row("Batches Already Present", str(stats["batches_duplicate"]))
    stats_table.add_row("Readings Written", str(stats["readings"]))

    console.print(stats_table)

    if stats.get("errors"):
        console.print()
        console.print(
            Panel(
                f"[yellow]{len(stats['errors'])} errors occurred during seeding[/yellow]",
                border_style="yellow",
            )
        )
        for i, error in enumerate(stats["errors"][:5], 1):
            console.print(f"  {i}. [dim]{error}[/dim]")

    console.print()


async def print_site_totals():
    """Running totals as stored on each site row."""
    async with Database() as session:
        sites = await SiteRepository(session).list_sites()

    sites_table = Table(show_header=True, box=None, padding=(0, 2))
    sites_table.add_column("Site", style="bold cyan")
    sites_table.add_column("Limit (kg)", justify="right")
    sites_table.add_column("Total (kg)", justify="right")
    sites_table.add_column("Status")

    for site in sites:
        status = get_compliance_status(site.total_emissions_to_date, site.emission_limit)
        status_style = "green" if status == ComplianceStatus.WITHIN_LIMIT else "bold red"
        sites_table.add_row(
            site.name,
            str(site.emission_limit),
            str(site.total_emissions_to_date),
            f"[{status_style}]{status.value}[/{status_style}]",
        )

    console.print(sites_table)
    console.print()


async def main():
    """Main entry point for the seeding script."""
    parser = argparse.ArgumentParser(
        description="Seed the database with demo sites and readings"
    )
    parser.add_argument(
        "--clear",
        action="store_true",
        help="Clear existing sites, readings and ingestion logs before seeding",
    )
    parser.add_argument(
        "--skip-readings",
        action="store_true",
        help="Create sites without ingesting demo readings",
    )
    parser.add_argument(
        "--migrate",
        action="store_true",
        help="Create the database and apply migrations before seeding",
    )
    parser.add_argument(
        "--config",
        type=str,
        default=f"{os.environ.get('ENVIRONMENT', 'development')}.toml",
        help="Config file name (default: $ENVIRONMENT.toml)",
    )

    args = parser.parse_args()

    print_header("DATABASE SEEDING", "bold cyan")
    print_config(args)

    try:
        config = get_config(args.config)
        if args.migrate:
            await apply_db_migration(config)

        Database.init(get_db_url(config), engine_kw=engine_kw)
        logger.info("Database initialized")

        with console.status("[bold cyan]Seeding database...", spinner="dots"):
            async with DatabaseSeeder() as seeder:
                stats = await seeder.seed_all(
                    clear_existing=args.clear,
                    skip_readings=args.skip_readings,
                )

        print_stats(stats)
        await print_site_totals()

        console.print(
            Panel(
                Text("SEEDING COMPLETED SUCCESSFULLY", justify="center"),
                border_style="bold green",
                style="bold green",
            )
        )

    except Exception as e:
        logger.error(f"Seeding failed: {e}", exc_info=True)

        console.print()
        console.print(
            Panel(
                f"[bold red]SEEDING FAILED[/bold red]\n\n[red]{e!s}[/red]",
                border_style="bold red",
            )
        )
        console.print()
        sys.exit(1)
    finally:
        await Database.dispose()


if __name__ == "__main__":
    asyncio.run(main())

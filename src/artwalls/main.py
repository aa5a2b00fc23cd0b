"""
Artwalls - CLI Entry Point.

Usage:
    artwalls plans                      Show plan tiers
    artwalls earnings 200 --plan growth Split one sale
    artwalls project 150 12             Monthly net per plan
    artwalls status <artist-id>         Onboarding progress for an artist
    artwalls checkout <artist-id> pro   Start an upgrade checkout
    artwalls --help                     Show help
"""

import asyncio
import logging
import math

import typer
from rich.console import Console
from rich.table import Table

from artwalls.errors import ArtwallsError

app = typer.Typer(
    name="artwalls",
    help="Artwalls - artist onboarding and earnings tools.",
    add_completion=False,
)
console = Console()


@app.callback()
def main() -> None:
    from artwalls.config import settings

    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@app.command()
def plans() -> None:
    """Show every plan tier."""
    from artwalls.plans import all_plans

    table = Table(title="Artwalls Plans")
    table.add_column("Plan", style="bold")
    table.add_column("Take-home", justify="right")
    table.add_column("Monthly", justify="right")
    table.add_column("Artworks", justify="right")
    table.add_column("Protection")

    for plan in all_plans():
        ceiling = "unlimited" if math.isinf(plan.artwork_ceiling) else str(int(plan.artwork_ceiling))
        table.add_row(
            plan.name,
            f"{plan.take_home_percent}%",
            f"${plan.monthly_price}",
            ceiling,
            "included" if plan.protection_included else "$3 / artwork",
        )

    console.print(table)


@app.command()
def earnings(
    price: float = typer.Argument(..., help="Artwork list price in dollars"),
    plan: str = typer.Option("free", "--plan", "-p", help="Plan tier (free, starter, growth, pro)"),
) -> None:
    """Show how one sale is split between artist, venue and platform."""
    from artwalls.pricing import (
        application_fee_cents,
        calculate_pricing_breakdown,
        format_cents,
        platform_fee_bps,
    )

    try:
        split = calculate_pricing_breakdown(str(price), plan)
    except ArtwallsError as e:
        console.print(f"[red]{e.message}[/red]")
        raise typer.Exit(1)

    table = Table(title=f"Sale split on {plan.lower()} ({split.take_home_percent}% take-home)")
    table.add_column("")
    table.add_column("Amount", justify="right")
    table.add_row("List price", format_cents(split.list_price_cents))
    table.add_row("[green]Artist[/green]", format_cents(split.artist_cents))
    table.add_row("Venue", format_cents(split.venue_cents))
    table.add_row("Platform + processing", format_cents(split.platform_remainder_cents))
    table.add_row("Buyer support fee", format_cents(split.buyer_fee_cents))
    table.add_row("[bold]Buyer pays[/bold]", format_cents(split.buyer_total_cents))
    console.print(table)
    console.print(
        f"[dim]Application fee {format_cents(application_fee_cents(split))}, "
        f"platform {platform_fee_bps(split)} bps[/dim]"
    )


@app.command()
def project(
    sale_value: float = typer.Argument(..., help="Average sale value in dollars"),
    artworks: int = typer.Argument(..., help="Artworks sold per month"),
    no_protection: bool = typer.Option(
        False, "--no-protection", help="Charge the per-artwork protection add-on"
    ),
) -> None:
    """Project monthly net earnings on every plan."""
    from artwalls.plans import PLANS
    from artwalls.pricing import calculate_monthly_net, recommend_plan

    protection_included = not no_protection
    try:
        projections = [
            calculate_monthly_net(tier, str(sale_value), artworks, protection_included)
            for tier in PLANS
        ]
        best = recommend_plan(str(sale_value), artworks, protection_included)
    except ArtwallsError as e:
        console.print(f"[red]{e.message}[/red]")
        raise typer.Exit(1)

    table = Table(title=f"{artworks} artworks/month at ${sale_value:,.2f}")
    table.add_column("Plan", style="bold")
    table.add_column("Artworks", justify="right")
    table.add_column("Gross", justify="right")
    table.add_column("Subscription", justify="right")
    table.add_column("Protection", justify="right")
    table.add_column("Net", justify="right")

    for p in projections:
        marker = " *" if p.tier == best else ""
        counted = f"{p.allowed_artworks}" + (" (capped)" if p.is_capped else "")
        table.add_row(
            f"{PLANS[p.tier].name}{marker}",
            counted,
            f"${p.gross:,.2f}",
            f"${p.subscription_price:,.2f}",
            f"${p.protection_cost:,.2f}",
            f"[green]${p.net:,.2f}[/green]",
        )

    console.print(table)
    console.print(f"[dim]* best net: {PLANS[best].name}[/dim]")
    if any(p.is_capped for p in projections):
        console.print("[yellow]Capped plans only count artworks up to their monthly limit.[/yellow]")


@app.command()
def status(actor_id: str = typer.Argument(..., help="Artist id")) -> None:
    """Show an artist's onboarding progress (reads Supabase)."""
    from artwalls.db.client import get_service_client
    from onboarding.orchestrator import OnboardingOrchestrator
    from onboarding.store import SupabaseArtworkStore, SupabaseOnboardingStore, SupabaseProfileStore

    db = get_service_client()
    orchestrator = OnboardingOrchestrator(
        actor_id,
        state_store=SupabaseOnboardingStore(db),
        profile_store=SupabaseProfileStore(db),
        artwork_store=SupabaseArtworkStore(db),
    )

    try:
        snapshot = asyncio.run(orchestrator.load())
    except ArtwallsError as e:
        console.print(f"[red]{e.message}[/red]")
        raise typer.Exit(1)

    def mark(ok: bool) -> str:
        return "✅" if ok else "❌"

    console.print(f"\n[bold]Onboarding for {actor_id}[/bold]\n")
    console.print(f"  Step: {snapshot.step} of 6 ({snapshot.progress_percent}%)")
    console.print(f"  Completed: {'yes' if snapshot.completed else 'no'}")
    console.print(f"  {mark(snapshot.gates.basics)} Basics")
    console.print(f"  {mark(snapshot.gates.style)} Style")
    console.print(f"  {mark(snapshot.gates.artworks)} Artworks ({snapshot.artwork_count} published)")
    selected = snapshot.selected_plan.value if snapshot.selected_plan else "none"
    active = snapshot.active_plan.value if snapshot.active_plan else "none"
    console.print(f"  Plan: {selected} selected, {active} active")
    console.print(f"  Profile completeness: {snapshot.profile_percentage}%")


@app.command()
def checkout(
    actor_id: str = typer.Argument(..., help="Artist id"),
    tier: str = typer.Argument(..., help="Paid plan tier (starter, growth, pro)"),
    access_token: str = typer.Option(
        ..., "--access-token", envvar="ARTWALLS_ACCESS_TOKEN", help="The artist's session token"
    ),
) -> None:
    """Start a hosted checkout for a plan upgrade and print the redirect URL."""
    from artwalls.db.request_context import request_context
    from artwalls.payments.checkout import StripeCheckoutSessions
    from onboarding.plan_bridge import PlanBridge

    bridge = PlanBridge(actor_id, StripeCheckoutSessions())

    try:
        with request_context(access_token, actor_id):
            session = asyncio.run(bridge.request_upgrade(tier))
    except ArtwallsError as e:
        console.print(f"[red]{e.message}[/red]")
        raise typer.Exit(1)

    console.print(f"[green]Checkout ready:[/green] {session.redirect_url}")


@app.command()
def version() -> None:
    """Show version information."""
    from artwalls import __version__

    console.print(f"Artwalls version {__version__}")


if __name__ == "__main__":
    app()

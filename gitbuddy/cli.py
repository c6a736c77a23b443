"""
gitbuddy — Command Line Interface.

Commands:
    gitbuddy adopt NAME   Create your companion
    gitbuddy scan         Rescan the repository and feed vitality
    gitbuddy status       Show level, vitality and mood
    gitbuddy stats        Repository fun facts
    gitbuddy feed         Eat TODO/FIXME markers for XP
    gitbuddy watch        Rescan on an interval
    gitbuddy reset        Delete the companion
    gitbuddy version      Show version
"""

from __future__ import annotations

import asyncio
import logging
import sys

import click
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from gitbuddy import __version__, config
from gitbuddy.companion import Companion, ScanOutcome
from gitbuddy.health import CheckStatus, RepositoryHealth, repo_stats
from gitbuddy.progression import Mood, level_progress, level_title
from gitbuddy.state import ProgressionState, StateStore

console = Console()

STATUS_STYLE = {
    CheckStatus.GREAT: ("🟢", "green"),
    CheckStatus.OK: ("🟡", "yellow"),
    CheckStatus.WARNING: ("🟠", "dark_orange"),
    CheckStatus.BAD: ("🔴", "red"),
}

MOOD_FACE = {
    Mood.EXCITED: "(ᵔᴥᵔ)!!",
    Mood.HAPPY: "(ᵔᴥᵔ)",
    Mood.NEUTRAL: "(•ᴥ•)",
    Mood.SAD: "(╥ᴥ╥)",
    Mood.SICK: "(×ᴥ×)",
    Mood.SLEEPING: "(-ᴥ-) zzz",
}


def setup_logging(verbose: bool = False) -> None:
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(name)s] %(levelname)s — %(message)s",
        datefmt="%H:%M:%S",
    )


# ─── Rendering Helpers ────────────────────────────────────────────────


def _health_table(health: RepositoryHealth) -> Table:
    table = Table(title="▸ Repository Health", show_header=True, header_style="bold")
    table.add_column("", width=2)
    table.add_column("Check", style="cyan")
    table.add_column("Value")
    table.add_column("Score", justify="right")
    table.add_column("Weight", justify="right")
    for c in health.checks:
        icon, color = STATUS_STYLE[c.status]
        table.add_row(icon, c.name, c.value, f"[{color}]{c.score}[/]", f"{c.weight}%")
    return table


def _progress_lines(state: ProgressionState, mood: Mood) -> list[str]:
    current, span, pct = level_progress(state.experience)
    if state.level >= 5:
        xp_line = f"XP: {state.experience} (max level)"
    else:
        xp_line = f"XP: {state.experience} ({current}/{span}, {pct:.0f}%)"
    return [
        f"[bold]{state.name or 'Your buddy'}[/] {MOOD_FACE[mood]}  [dim]{mood.value}[/]",
        f"Level {state.level} — {level_title(state.level)}",
        xp_line,
        f"Vitality: {state.vitality}/100",
    ]


def _print_level_up(state: ProgressionState) -> None:
    console.print(
        Panel(
            f"[bold yellow]🎉 LEVEL UP! {state.name or 'Your buddy'} is now a "
            f"{level_title(state.level)} (level {state.level})[/]",
            border_style="yellow",
        )
    )


def _print_achievements(unlocked) -> None:
    for a in unlocked:
        console.print(f"  🏆 {a.icon} [bold]{a.name}[/]: {a.description} [green]+{a.xp_reward} XP[/]")


def _require_companion(store: StateStore) -> None:
    if not store.exists():
        console.print("[yellow]No companion yet. Run 'gitbuddy adopt NAME' first.[/]")
        sys.exit(1)


# ─── Click Group ──────────────────────────────────────────────────────


@click.group(invoke_without_command=True)
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
@click.option(
    "--repo",
    type=click.Path(file_okay=False),
    default=None,
    help="Working copy to inspect (default: current directory)",
)
@click.pass_context
def cli(ctx: click.Context, verbose: bool, repo: str | None) -> None:
    """gitbuddy — a companion that thrives on a healthy repository."""
    setup_logging(verbose)
    ctx.ensure_object(dict)
    ctx.obj["repo"] = repo

    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


def _build_companion(ctx: click.Context) -> Companion:
    return Companion(cwd=ctx.obj["repo"], store=StateStore())


# ─── Commands ─────────────────────────────────────────────────────────


@cli.command()
@click.argument("name")
@click.pass_context
def adopt(ctx: click.Context, name: str) -> None:
    """Create your companion, starting from the repository's health."""
    buddy = _build_companion(ctx)
    if buddy.store.exists():
        console.print("[yellow]You already have a companion. Use 'gitbuddy reset' first.[/]")
        sys.exit(1)
    buddy.store.create(name)
    outcome = buddy.rescan()
    if not outcome.health.is_git_repo:
        console.print("[yellow]Not inside a git repository; starting at default vitality.[/]")
    console.print(f"[green]✅ {name} was born![/] Vitality {outcome.state.vitality}/100")


@cli.command()
@click.pass_context
def scan(ctx: click.Context) -> None:
    """Rescan the repository and update vitality."""
    buddy = _build_companion(ctx)
    _require_companion(buddy.store)
    with console.status("[bold blue]*sniff sniff* Scanning repo...[/]"):
        outcome = buddy.rescan()
    _print_scan(buddy, outcome)
    if not outcome.health.is_git_repo:
        sys.exit(1)


def _print_scan(buddy: Companion, outcome: ScanOutcome) -> None:
    health = outcome.health
    if not health.is_git_repo:
        console.print("[red]❌ Not a git repository — nothing to sniff here.[/]")
        return
    console.print(_health_table(health))
    console.print(
        f"  Score: [bold]{health.total_score}/100[/] | "
        f"Commits: {health.commit_count} | Streak: {health.streak} days | "
        f"[green]+{outcome.xp_gained} XP[/]"
    )
    mood = buddy.mood(0, outcome.state)
    console.print(Panel("\n".join(_progress_lines(outcome.state, mood)), border_style="cyan"))
    _print_achievements(outcome.achievements)
    if outcome.leveled_up:
        _print_level_up(outcome.state)


@cli.command()
@click.option("--idle", type=float, default=0.0, help="Seconds since last interaction")
@click.pass_context
def status(ctx: click.Context, idle: float) -> None:
    """Show level, vitality and mood (applies absence decay)."""
    buddy = _build_companion(ctx)
    _require_companion(buddy.store)
    visit = buddy.visit()
    if visit.decay:
        console.print(
            f"[yellow]💤 Away {visit.hours_away / 24:.0f} days — lost {visit.decay} vitality[/]"
        )
    mood = buddy.mood(idle, visit.state)
    console.print(Panel("\n".join(_progress_lines(visit.state, mood)), border_style="cyan"))


@cli.command()
@click.pass_context
def stats(ctx: click.Context) -> None:
    """Repository fun facts."""
    buddy = _build_companion(ctx)
    facts = asyncio.run(repo_stats(buddy.cwd))
    state = buddy.store.load()

    table = Table(title="📊 Statistics", show_header=True, header_style="bold")
    table.add_column("Field", style="cyan")
    table.add_column("Value")
    ext, count = facts.top_extension
    table.add_row("Total commits", str(facts.total_commits))
    table.add_row("First commit", f"{facts.first_commit_days} days ago")
    table.add_row("Top extension", f"{ext} ({count} files)")
    table.add_row("Avg commit message", f"{facts.avg_commit_message_length} chars")
    if state is not None:
        table.add_row("Total scans", str(state.total_scans))
        table.add_row("Total feeds", str(state.total_feeds))
        table.add_row("Longest streak", f"{state.longest_streak} days")
        table.add_row("Achievements", str(len(state.achievements)))
    console.print(table)


@cli.command()
@click.pass_context
def feed(ctx: click.Context) -> None:
    """Feed TODO/FIXME markers to your companion for XP."""
    buddy = _build_companion(ctx)
    _require_companion(buddy.store)
    outcome = buddy.feed()
    if not outcome.issues:
        console.print("[green]🍽️  Nothing to eat — no TODO/FIXME markers found.[/]")
    for issue in outcome.issues:
        console.print(f"  🦴 {issue[:100]}")
    console.print(f"  [green]+{outcome.xp_gained} XP[/]")
    _print_achievements(outcome.achievements)
    if outcome.leveled_up:
        _print_level_up(outcome.state)


@cli.command()
@click.option(
    "--interval",
    type=click.IntRange(min=1),
    default=None,
    help=f"Seconds between scans (default: {config.WATCH_INTERVAL})",
)
@click.pass_context
def watch(ctx: click.Context, interval: int | None) -> None:
    """Rescan on an interval until interrupted."""
    buddy = _build_companion(ctx)
    _require_companion(buddy.store)
    buddy.watch(interval=interval, on_scan=lambda outcome: _print_scan(buddy, outcome))


@cli.command()
@click.confirmation_option(prompt="Say goodbye to your companion?")
def reset() -> None:
    """Delete the companion state."""
    if StateStore().reset():
        console.print("[green]✅ State removed.[/]")
    else:
        console.print("[red]❌ Could not remove state.[/]")
        sys.exit(1)


@cli.command()
def version() -> None:
    """Show gitbuddy version."""
    console.print(f"[bold cyan]gitbuddy[/] v{__version__}")


def main() -> None:
    cli()


if __name__ == "__main__":
    main()

"""
CASINOSIM — Console Reporting

Renders SimulationResult / ConsolidatedReport values with rich. Nothing in
here simulates; it only formats what the engine returned.

Usage:
    from rich.console import Console
    from tools.casino_report import render_report
    render_report(Console(), report)
"""

from rich.console import Console
from rich.panel import Panel
from rich.rule import Rule
from rich.table import Table

from sim_engine.casino.base import STOP_BUST, STOP_CAP, STOP_CHOICE, SimulationResult
from sim_engine.casino.campaign import ConsolidatedReport

CURRENCY = "$"

STOP_MESSAGES = {
    STOP_CHOICE: "Player walked away by choice.",
    STOP_BUST: "Player's balance ran out.",
    STOP_CAP: "Extra bets stopped at the safety cap.",
}


def money(value: float) -> str:
    return f"{CURRENCY} {value:,.2f}"


def render_game_intro(console: Console, simulator) -> None:
    """Print what is about to be simulated, including the real win chance."""
    meta = simulator.get_metadata()
    if meta["game_type"] == "roulette":
        console.print(f"[cyan]{simulator.label} selected[/cyan]")
        console.print(f"Real win chance: {meta['win_chance_percent']:.2f}%  "
                      f"[dim](house edge {meta['house_edge_percent']:.2f}%)[/dim]")
    else:
        console.print(f"[cyan]{meta['display_name']}[/cyan] - configured chance: "
                      f"{meta['win_chance_percent']:.1f}%")


def render_player_header(console: Console, index: int) -> None:
    console.print()
    console.print(Rule(f"[bold]Simulation for Player {index}[/bold]"))


def render_result(console: Console, result: SimulationResult, title: str = "") -> None:
    """Per-player results panel."""
    if result.stop_reason is not None:
        console.print(f"[green]Positive balance after {result.initial_rounds_played} rounds, "
                      f"{result.extra_rounds_played} extra bet(s) placed.[/green] "
                      f"{STOP_MESSAGES.get(result.stop_reason, '')}")

    table = Table(show_header=False, box=None, pad_edge=False)
    table.add_column(style="dim")
    table.add_column(justify="right")
    table.add_row("Rounds played", f"{result.rounds_played:,}")
    table.add_row("Player wins", f"{result.player_wins:,}")
    table.add_row("Money lost by player", money(result.player_losses))
    table.add_row("House wins", f"{result.house_wins:,}")
    table.add_row("Casino take", money(result.player_losses))
    table.add_row("Player final result", _signed(result.final_balance))
    table.add_row("Casino net profit", _signed(result.casino_net_profit))

    console.print(Panel(table, title=title or f"Final Results: {result.game_type}",
                        border_style="green" if result.final_balance > 0 else "red"))


def render_report(console: Console, report: ConsolidatedReport) -> None:
    """Consolidated statistics across every player."""
    table = Table(show_header=False, box=None, pad_edge=False)
    table.add_column(style="dim")
    table.add_column(justify="right")
    table.add_row("Players", f"{report.player_count:,}")
    table.add_row("Total rounds", f"{report.total_rounds:,}")
    table.add_row("Total player wins", f"{report.total_player_wins:,}")
    table.add_row("Total house wins", f"{report.total_house_wins:,}")
    table.add_row("Consolidated player result", _signed(report.total_balance))

    edge = report.house_edge_observed
    if edge is None:
        table.add_row("House win rate", "[yellow]n/a[/yellow]")
    else:
        table.add_row("House win rate", f"{edge:.2f}%")

    console.print(Panel(table, title="General Statistics", border_style="cyan"))

    if report.degenerate:
        console.print("[yellow]⚠️ No rounds were played; rates cannot be derived.[/yellow]")
    elif report.players_profited:
        console.print("[bold green]The players made a collective profit (rare!)[/bold green]")
    else:
        console.print(f"Average loss per player: [red]{money(report.average_loss_per_player)}[/red]")


def _signed(value: float) -> str:
    color = "green" if value > 0 else "red" if value < 0 else "white"
    return f"[{color}]{money(value)}[/{color}]"

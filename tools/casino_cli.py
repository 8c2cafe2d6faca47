#!/usr/bin/env python3
"""
CASINOSIM — Casino Simulator CLI

Asks for whatever was not given as a flag, runs the campaign and prints the
per-player panels and the consolidated report.

Usage:
    python -m tools.casino_cli
    python -m tools.casino_cli --players 50 --game roulette --wheel american --extra-bets
    python -m tools.casino_cli --players 1000 --game slots --no-extra-bets --quiet --seed 7
    python -m tools.casino_cli --game slots --win-chance 45 --dump-config
"""

import argparse
import logging
import sys
from typing import Optional

from rich.console import Console
from rich.panel import Panel
from rich.prompt import Confirm, IntPrompt, Prompt

from config.casino_schema import (
    GAME_MENU, WHEEL_MENU, CampaignConfig, GameChoice, InvalidConfiguration, WheelVariant,
    params_for_game, validate_params,
)
from config.settings import SimConfig
from sim_engine.casino import GAME_TYPES, get_simulator, run_campaign
from sim_engine.casino.roulette import WHEEL_LABELS, house_edge_percent
from tools.casino_report import render_game_intro, render_player_header, render_report, render_result

logger = logging.getLogger("casinosim.cli")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="casinosim",
                                     description="Simulate casino players at slots or roulette")
    parser.add_argument("--players", type=int, help="Number of simulated players")
    parser.add_argument("--game", choices=GAME_TYPES)
    parser.add_argument("--wheel", choices=[w.value for w in WheelVariant], help="Roulette wheel")
    parser.add_argument("--extra-bets", dest="extra_bets", action=argparse.BooleanOptionalAction,
                        default=None, help="Keep betting while ahead")
    parser.add_argument("--bet", type=float, help=f"Stake per round (default {SimConfig.BET_AMOUNT})")
    parser.add_argument("--rounds", type=int, help=f"Initial rounds per player (default {SimConfig.ROUNDS})")
    parser.add_argument("--win-chance", type=float,
                        help=f"Slot machine win chance in percent (default {SimConfig.SLOTS_WIN_CHANCE})")
    parser.add_argument("--stop-probability", type=float, help="Chance of quitting before each extra bet")
    parser.add_argument("--max-extra-rounds", type=int, help="Safety cap on extra bets per player")
    parser.add_argument("--seed", type=int, default=None, help="Seed for a reproducible run")
    parser.add_argument("--json", action="store_true", help="Print the report as JSON")
    parser.add_argument("--quiet", action="store_true", help="Only print the consolidated report")
    parser.add_argument("--dump-config", action="store_true", help="Print resolved parameters and exit")
    parser.add_argument("--log-level", default=SimConfig.LOG_LEVEL)
    return parser


def ask_missing(args: argparse.Namespace, console: Console) -> argparse.Namespace:
    """Prompt for every campaign input not supplied on the command line."""
    if args.players is None:
        args.players = IntPrompt.ask("Number of players", console=console)
    if args.players <= 0:
        raise InvalidConfiguration(f"player_count must be positive, got {args.players}")

    if args.game is None:
        console.print("\nChoose the game:\n  1. Slot Machine\n  2. Roulette")
        args.game = GAME_MENU[Prompt.ask("Option", choices=list(GAME_MENU), console=console)].value

    if args.game == GameChoice.ROULETTE.value and args.wheel is None:
        console.print("\nChoose the roulette type:")
        for key, variant in WHEEL_MENU.items():
            console.print(f"  {key}. {WHEEL_LABELS[variant]} - house edge: "
                          f"{house_edge_percent(variant):.2f}%")
        args.wheel = WHEEL_MENU[Prompt.ask("Option", choices=list(WHEEL_MENU), console=console)].value

    if args.extra_bets is None:
        args.extra_bets = Confirm.ask("\nEnable extra bets?", default=False, console=console)
    return args


def game_params_from_args(args: argparse.Namespace) -> dict:
    params = {
        "bet": args.bet,
        "round_count": args.rounds,
        "extra_bets_enabled": args.extra_bets,
        "stop_probability": args.stop_probability,
        "max_extra_rounds": args.max_extra_rounds,
        "win_chance_percent": args.win_chance,
        "wheel_variant": args.wheel,
    }
    return {k: v for k, v in params.items() if v is not None}


def main(argv: Optional[list] = None, console: Optional[Console] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, str(args.log_level).upper(), logging.WARNING),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        datefmt="%H:%M:%S",
    )
    console = console or Console()

    if not (args.json or args.dump_config):
        console.print(Panel("[bold]🎰 CASINO SIMULATOR[/bold]", border_style="cyan"))

    try:
        if args.dump_config:
            if args.game is None:
                raise InvalidConfiguration("--dump-config needs --game")
            args.extra_bets = bool(args.extra_bets)
            config = None
        else:
            # --json keeps stdout for the report alone
            prompt_console = Console(stderr=True) if args.json else console
            args = ask_missing(args, prompt_console)
            config = validate_params(CampaignConfig, {"player_count": args.players, "game": args.game})
        game = GameChoice(args.game)
        params = params_for_game(game, game_params_from_args(args))
        simulator = get_simulator(game, params)
    except InvalidConfiguration as e:
        logger.error(f"Configuration rejected: {e}")
        console.print(f"[red]❌ {e}[/red]")
        return 2

    if args.dump_config:
        console.out(params.model_dump_json(indent=2), highlight=False)
        return 0

    verbose = not (args.quiet or args.json)

    def _on_player(index, result):
        render_player_header(console, index)
        render_game_intro(console, simulator)
        render_result(console, result, title=f"Final Results: {simulator.display_name}")

    report = run_campaign(config.player_count, game, params,
                          rng=SimConfig.make_rng(args.seed),
                          on_player=_on_player if verbose else None)

    if args.json:
        console.out(report.to_json(), highlight=False)
    else:
        console.print()
        render_report(console, report)
    return 0


if __name__ == "__main__":
    sys.exit(main())

#!/usr/bin/env python3
"""
Tests for the casino simulator CLI and console reporting

Validates:
1. Flag-only runs need no prompts and print per-player panels + report
2. --json emits a parseable ConsolidatedReport
3. --seed makes runs reproducible
4. Invalid configuration exits with status 2 before simulating
5. Missing inputs are prompted for (players, game, wheel, extra bets); with --json
   the prompts go to stderr and a bad player count stops before the next prompt
6. --dump-config prints resolved parameters
7. Degenerate and profitable reports render their notices
"""

import io
import json
import sys
from pathlib import Path
from unittest.mock import patch

PROJECT_ROOT = Path(__file__).parent
sys.path.insert(0, str(PROJECT_ROOT))

from rich.console import Console

from sim_engine.casino.base import STOP_CHOICE, SimulationResult
from sim_engine.casino.campaign import ConsolidatedReport
from tools.casino_cli import build_parser, game_params_from_args, main
from tools.casino_report import render_report, render_result


def _console():
    return Console(file=io.StringIO(), width=120, force_terminal=False, color_system=None)


def _run(argv):
    console = _console()
    code = main(argv, console=console)
    return code, console.file.getvalue()


# ============================================================
# Non-interactive runs
# ============================================================

def test_flags_run_without_prompts():
    with patch("tools.casino_cli.IntPrompt.ask") as int_ask, \
         patch("tools.casino_cli.Prompt.ask") as ask, \
         patch("tools.casino_cli.Confirm.ask") as confirm:
        code, out = _run(["--players", "3", "--game", "slots", "--no-extra-bets", "--seed", "1"])
    assert code == 0
    assert not int_ask.called and not ask.called and not confirm.called
    assert "Simulation for Player 3" in out
    assert "configured chance: 48.5%" in out
    assert "General Statistics" in out


def test_roulette_intro_shows_real_win_chance():
    code, out = _run(["--players", "1", "--game", "roulette", "--wheel", "american",
                      "--extra-bets", "--seed", "2"])
    assert code == 0
    assert "American (38 numbers, 0, 00, 1-36) selected" in out
    assert "Real win chance: 47.37%" in out


def test_json_output():
    code, out = _run(["--players", "4", "--game", "roulette", "--wheel", "european",
                      "--no-extra-bets", "--rounds", "20", "--json", "--seed", "5"])
    assert code == 0
    data = json.loads(out)
    assert data["player_count"] == 4
    assert data["game_type"] == "roulette"
    assert data["totals"]["rounds"] == 80
    assert data["parameters"]["wheel_variant"] == "european"


def test_seed_reproducible():
    argv = ["--players", "6", "--game", "slots", "--extra-bets", "--json", "--seed", "11"]
    _, first = _run(argv)
    _, second = _run(argv)
    assert json.loads(first)["totals"] == json.loads(second)["totals"]
    assert json.loads(first)["players"] == json.loads(second)["players"]


def test_quiet_skips_player_panels():
    code, out = _run(["--players", "2", "--game", "slots", "--no-extra-bets", "--quiet"])
    assert code == 0
    assert "Simulation for Player" not in out
    assert "General Statistics" in out


# ============================================================
# Invalid configuration
# ============================================================

def test_zero_players_rejected():
    with patch("tools.casino_cli.run_campaign") as run:
        code, out = _run(["--players", "0", "--game", "slots", "--no-extra-bets"])
    assert code == 2
    assert "player_count" in out
    assert not run.called


def test_win_chance_out_of_range_rejected():
    code, out = _run(["--players", "1", "--game", "slots", "--no-extra-bets", "--win-chance", "120"])
    assert code == 2
    assert "win_chance_percent" in out


def test_win_chance_not_allowed_for_roulette():
    code, _ = _run(["--players", "1", "--game", "roulette", "--wheel", "european",
                    "--no-extra-bets", "--win-chance", "40"])
    assert code == 2


def test_unknown_wheel_rejected_by_parser():
    try:
        build_parser().parse_args(["--wheel", "french"])
    except SystemExit as e:
        assert e.code == 2
    else:
        raise AssertionError("--wheel french should not parse")


# ============================================================
# Interactive prompts
# ============================================================

def test_prompts_for_missing_inputs():
    with patch("tools.casino_cli.IntPrompt.ask", return_value=2), \
         patch("tools.casino_cli.Prompt.ask", side_effect=["2", "2"]) as ask, \
         patch("tools.casino_cli.Confirm.ask", return_value=True):
        code, out = _run(["--seed", "4", "--quiet"])
    assert code == 0
    assert ask.call_count == 2
    assert "American (38 numbers, 0, 00, 1-36) - house edge: 5.26%" in out
    assert "General Statistics" in out


def test_slots_choice_skips_wheel_prompt(capsys):
    with patch("tools.casino_cli.IntPrompt.ask", return_value=1), \
         patch("tools.casino_cli.Prompt.ask", side_effect=["1"]) as ask, \
         patch("tools.casino_cli.Confirm.ask", return_value=False):
        code, out = _run(["--seed", "4", "--json"])
    assert code == 0
    assert ask.call_count == 1
    data = json.loads(out)
    assert data["player_count"] == 1
    assert data["game_type"] == "slots"
    err = capsys.readouterr().err
    assert "Choose the game" in err
    assert "Choose the roulette type" not in err


def test_prompted_zero_players_rejected_before_other_prompts():
    with patch("tools.casino_cli.IntPrompt.ask", return_value=0), \
         patch("tools.casino_cli.Prompt.ask") as ask, \
         patch("tools.casino_cli.Confirm.ask") as confirm, \
         patch("tools.casino_cli.run_campaign") as run:
        code, out = _run(["--seed", "4"])
    assert code == 2
    assert "player_count must be positive" in out
    assert not ask.called
    assert not confirm.called
    assert not run.called


# ============================================================
# --dump-config
# ============================================================

def test_dump_config():
    code, out = _run(["--game", "slots", "--win-chance", "45", "--bet", "10", "--dump-config"])
    assert code == 0
    data = json.loads(out)
    assert data["win_chance_percent"] == 45.0
    assert data["bet"] == 10.0
    assert data["extra_bets_enabled"] is False


def test_dump_config_requires_game():
    code, _ = _run(["--dump-config"])
    assert code == 2


def test_game_params_from_args_drops_unset():
    args = build_parser().parse_args(["--game", "slots", "--bet", "5"])
    assert game_params_from_args(args) == {"bet": 5.0}


# ============================================================
# Reporting
# ============================================================

def test_degenerate_report_notice():
    console = _console()
    render_report(console, ConsolidatedReport(game_type="slots", player_count=3))
    out = console.file.getvalue()
    assert "n/a" in out
    assert "No rounds were played" in out


def test_profit_report_notice():
    report = ConsolidatedReport(game_type="slots")
    report.add(SimulationResult(final_balance=400.0, player_wins=3, house_wins=1, rounds_played=4))
    console = _console()
    render_report(console, report)
    out = console.file.getvalue()
    assert "collective profit" in out
    assert "25.00%" in out


def test_loss_report_average():
    report = ConsolidatedReport(game_type="slots")
    report.add(SimulationResult(final_balance=-400.0, player_wins=1, house_wins=3, rounds_played=4))
    report.add(SimulationResult(final_balance=-200.0, player_wins=2, house_wins=3, rounds_played=5))
    console = _console()
    render_report(console, report)
    assert "Average loss per player: $ 300.00" in console.file.getvalue()


def test_result_panel_mentions_extra_bets():
    result = SimulationResult(final_balance=600.0, player_wins=7, house_wins=4, rounds_played=11,
                              game_type="slots", bet=200.0, extra_rounds_played=1,
                              stop_reason=STOP_CHOICE)
    console = _console()
    render_result(console, result)
    out = console.file.getvalue()
    assert "1 extra bet(s) placed" in out
    assert "walked away by choice" in out
    assert "$ 800.00" in out  # money lost on 4 house wins

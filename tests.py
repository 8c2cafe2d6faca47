#!/usr/bin/env python3
"""
CASINOSIM — Unit & Integration Test Suite

Run: python tests.py
     python tests.py -v            # verbose
     python tests.py TestRoulette  # run specific class

Test categories:
  TestSimulationInvariants — balance/win/round bookkeeping for any seed
  TestSlots                — win rule, reproducibility, input validation
  TestRoulette             — wheel sizes, 1-18 bet, variant handling, convergence
  TestExtraBets            — entry condition, stop-before-play, bust, safety cap
  TestCampaign             — multi-player driver, totals, degenerate reports
  TestSchemaValidation     — pydantic parameter models and error conversion
  TestSettings             — env-driven defaults
"""

import dataclasses
import json
import math
import random
import sys
import unittest
from pathlib import Path
from unittest.mock import patch

# ── Ensure project root is on sys.path ──
PROJECT_ROOT = Path(__file__).parent
sys.path.insert(0, str(PROJECT_ROOT))

from config.casino_schema import (
    GameChoice, InvalidConfiguration, RouletteParams, SlotsParams, WheelVariant,
    resolve_game, resolve_wheel, validate_params,
)
from config.settings import SimConfig, _optional_int
from sim_engine.casino import (
    GAME_TYPES, ConsolidatedReport, RouletteSimulator, SlotsSimulator, get_simulator,
    run_campaign, simulate_roulette, simulate_slots,
)
from sim_engine.casino.base import STOP_BUST, STOP_CAP, STOP_CHOICE, SimulationResult
from sim_engine.casino.roulette import house_edge_percent, real_win_chance


class ScriptedRNG:
    """Replays fixed draws; raises IndexError if the engine draws more than scripted."""

    def __init__(self, floats=(), ints=()):
        self.floats = list(floats)
        self.ints = list(ints)
        self.ranges = []

    def random(self):
        return self.floats.pop(0)

    def randrange(self, n):
        self.ranges.append(n)
        value = self.ints.pop(0)
        assert 0 <= value < n, f"scripted {value} outside range({n})"
        return value


# ============================================================
# Invariants
# ============================================================

class TestSimulationInvariants(unittest.TestCase):
    """Bookkeeping that holds regardless of the random draws."""

    def _check(self, result, bet, round_count):
        self.assertEqual(result.player_wins + result.house_wins, result.rounds_played)
        self.assertEqual(result.final_balance, (result.player_wins - result.house_wins) * bet)
        self.assertGreaterEqual(result.rounds_played, round_count)
        self.assertEqual(result.rounds_played, round_count + result.extra_rounds_played)
        self.assertGreaterEqual(result.extra_rounds_played, 0)

    def test_slots_invariants_across_seeds(self):
        for seed in range(200):
            r = simulate_slots(200.0, 10, 48.5, True, rng=random.Random(seed))
            self._check(r, 200.0, 10)

    def test_roulette_invariants_across_seeds(self):
        for seed in range(200):
            for variant in ("european", "american"):
                r = simulate_roulette(200.0, 10, variant, True, rng=random.Random(seed))
                self._check(r, 200.0, 10)

    def test_balance_exact_for_fractional_bet(self):
        """0.1 is not representable; balance is still exactly net * bet."""
        for seed in range(50):
            r = simulate_slots(0.1, 37, 50.0, True, rng=random.Random(seed))
            self.assertEqual(r.final_balance, (r.player_wins - r.house_wins) * 0.1)

    def test_extra_rounds_only_when_ahead(self):
        for seed in range(200):
            r = simulate_slots(50.0, 5, 48.5, True, rng=random.Random(seed))
            initial_net = r.player_wins - r.house_wins
            if r.extra_rounds_played:
                self.assertIsNotNone(r.stop_reason)
            if r.stop_reason is None:
                self.assertEqual(r.rounds_played, 5)
                self.assertTrue(r.extra_rounds_played == 0)
                self.assertLessEqual(initial_net, 0)

    def test_result_is_immutable(self):
        r = simulate_slots(10.0, 3, 50.0, False, rng=random.Random(0))
        with self.assertRaises(dataclasses.FrozenInstanceError):
            r.final_balance = 1e9

    def test_break_even_profit_is_positive_zero(self):
        r = simulate_slots(10.0, 2, 50.0, False, rng=ScriptedRNG(floats=[0.1, 0.9]))
        self.assertEqual(r.final_balance, 0.0)
        self.assertEqual(math.copysign(1.0, r.casino_net_profit), 1.0)
        self.assertNotIn("-0.0", json.dumps(r.to_dict()))


# ============================================================
# Slot Machine
# ============================================================

class TestSlots(unittest.TestCase):

    def test_certain_win(self):
        r = simulate_slots(100.0, 5, 100.0, False, rng=random.Random(1))
        self.assertEqual((r.player_wins, r.house_wins, r.rounds_played), (5, 0, 5))
        self.assertEqual(r.final_balance, 500.0)
        self.assertIsNone(r.stop_reason)

    def test_certain_loss(self):
        r = simulate_slots(100.0, 5, 0.0, True, rng=random.Random(1))
        self.assertEqual((r.player_wins, r.house_wins), (0, 5))
        self.assertEqual(r.final_balance, -500.0)
        self.assertEqual(r.player_losses, 500.0)
        self.assertEqual(r.casino_net_profit, 500.0)

    def test_win_threshold_on_percent_scale(self):
        """Draw 0.48 → 48.0 < 48.5 wins; 0.49 → 49.0 loses."""
        rng = ScriptedRNG(floats=[0.48, 0.49])
        r = simulate_slots(10.0, 2, 48.5, False, rng=rng)
        self.assertEqual((r.player_wins, r.house_wins), (1, 1))
        self.assertEqual(rng.floats, [])

    def test_reproducible_with_seed(self):
        a = simulate_slots(100, 5, 50.0, False, rng=random.Random(1234))
        b = simulate_slots(100, 5, 50.0, False, rng=random.Random(1234))
        self.assertEqual(a, b)

    def test_zero_rounds(self):
        r = simulate_slots(100.0, 0, 50.0, True, rng=ScriptedRNG())
        self.assertEqual(r.rounds_played, 0)
        self.assertEqual(r.final_balance, 0.0)
        self.assertIsNone(r.player_win_rate)

    def test_rejects_bad_inputs(self):
        bad = [
            dict(bet=0, round_count=5, win_chance_percent=50.0),
            dict(bet=-10, round_count=5, win_chance_percent=50.0),
            dict(bet=math.nan, round_count=5, win_chance_percent=50.0),
            dict(bet=math.inf, round_count=5, win_chance_percent=50.0),
            dict(bet=10, round_count=-1, win_chance_percent=50.0),
            dict(bet=10, round_count=5, win_chance_percent=100.5),
            dict(bet=10, round_count=5, win_chance_percent=-0.1),
            dict(bet=10, round_count=5, win_chance_percent=math.nan),
        ]
        for kwargs in bad:
            rng = ScriptedRNG()
            with self.assertRaises(InvalidConfiguration, msg=str(kwargs)):
                simulate_slots(extra_bets_enabled=False, rng=rng, **kwargs)

    def test_invalid_configuration_is_value_error(self):
        with self.assertRaises(ValueError):
            simulate_slots(0, 5, 50.0, False)

    def test_simulator_rejects_out_of_range_chance(self):
        with self.assertRaises(InvalidConfiguration):
            SlotsSimulator(150)
        with self.assertRaises(InvalidConfiguration):
            SlotsSimulator(50, stop_probability=1.5)
        with self.assertRaises(InvalidConfiguration):
            SlotsSimulator(50, max_extra_rounds=0)

    def test_simulate_method_rejects_bad_stake_and_rounds(self):
        cases = [
            (SlotsSimulator(50.0), -5.0, 3),
            (SlotsSimulator(50.0), 5.0, -3),
            (SlotsSimulator(50.0), math.inf, 3),
            (RouletteSimulator("european"), 0.0, 3),
            (RouletteSimulator("american"), math.nan, 3),
            (RouletteSimulator("european"), 10.0, 2.5),
        ]
        for simulator, bet, rounds in cases:
            rng = ScriptedRNG()
            with self.assertRaises(InvalidConfiguration, msg=f"{simulator.game_type} {bet} {rounds}"):
                simulator.simulate(bet, rounds, True, rng=rng)
            self.assertEqual(rng.ranges, [])


# ============================================================
# Roulette
# ============================================================

class TestRoulette(unittest.TestCase):

    def test_european_pockets(self):
        rng = ScriptedRNG(ints=[0, 1, 18, 19, 36])
        r = simulate_roulette(10.0, 5, "european", False, rng=rng)
        self.assertEqual((r.player_wins, r.house_wins), (2, 3))
        self.assertEqual(set(rng.ranges), {37})

    def test_american_uses_38_slots(self):
        rng = ScriptedRNG(ints=[37, 36, 18, 0])
        r = simulate_roulette(10.0, 4, "american", False, rng=rng)
        self.assertEqual((r.player_wins, r.house_wins), (1, 3))
        self.assertEqual(set(rng.ranges), {38})
        self.assertEqual(RouletteSimulator("american").slot_count, 38)

    def test_unknown_variant_rejected(self):
        rng = ScriptedRNG()
        with self.assertRaises(InvalidConfiguration):
            simulate_roulette(10.0, 5, "french", False, rng=rng)
        with self.assertRaises(InvalidConfiguration):
            RouletteSimulator("french")
        self.assertEqual(rng.ranges, [])

    def test_variant_case_and_menu_numbers(self):
        self.assertEqual(resolve_wheel("EUROPEAN"), WheelVariant.EUROPEAN)
        self.assertEqual(resolve_wheel(" American "), WheelVariant.AMERICAN)
        self.assertEqual(resolve_wheel(2), WheelVariant.AMERICAN)
        self.assertEqual(resolve_wheel(WheelVariant.EUROPEAN), WheelVariant.EUROPEAN)

    def test_real_win_chance(self):
        self.assertAlmostEqual(real_win_chance("european"), 18 / 37 * 100)
        self.assertAlmostEqual(real_win_chance("american"), 18 / 38 * 100)
        self.assertAlmostEqual(RouletteSimulator("european").win_chance_percent, 48.6486, places=3)

    def test_house_edge(self):
        self.assertAlmostEqual(house_edge_percent("european"), 2.7027, places=3)
        self.assertAlmostEqual(house_edge_percent("american"), 5.2632, places=3)

    def test_european_win_rate_converges(self):
        """Long-run win rate sits near 18/37 (statistical, tolerance band)."""
        r = simulate_roulette(1.0, 200_000, "european", False, rng=random.Random(2024))
        self.assertAlmostEqual(r.player_wins / r.rounds_played, 18 / 37, delta=0.01)

    def test_american_wins_less_than_european(self):
        eu = simulate_roulette(1.0, 200_000, "european", False, rng=random.Random(5))
        us = simulate_roulette(1.0, 200_000, "american", False, rng=random.Random(5))
        self.assertAlmostEqual(us.player_wins / us.rounds_played, 18 / 38, delta=0.01)
        self.assertLess(us.player_wins, eu.player_wins)

    def test_metadata(self):
        meta = RouletteSimulator("american").get_metadata()
        self.assertEqual(meta["slot_count"], 38)
        self.assertEqual(meta["wheel_variant"], "american")
        self.assertEqual(meta["game_type"], "roulette")


# ============================================================
# Extra Bets
# ============================================================

class TestExtraBets(unittest.TestCase):

    def test_not_entered_when_behind(self):
        rng = ScriptedRNG(floats=[0.9, 0.9, 0.9, 0.9])
        r = simulate_slots(10.0, 4, 50.0, True, rng=rng)
        self.assertEqual(r.rounds_played, 4)
        self.assertEqual(r.extra_rounds_played, 0)
        self.assertIsNone(r.stop_reason)
        self.assertEqual(rng.floats, [])

    def test_not_entered_when_even(self):
        rng = ScriptedRNG(floats=[0.1, 0.9, 0.1, 0.9])
        r = simulate_slots(10.0, 4, 50.0, True, rng=rng)
        self.assertEqual(r.final_balance, 0.0)
        self.assertEqual(r.rounds_played, 4)
        self.assertIsNone(r.stop_reason)

    def test_not_entered_when_disabled(self):
        rng = ScriptedRNG(floats=[0.1, 0.1])
        r = simulate_slots(10.0, 2, 50.0, False, rng=rng)
        self.assertEqual(r.final_balance, 20.0)
        self.assertIsNone(r.stop_reason)
        self.assertEqual(rng.floats, [])

    def test_stop_checked_before_round(self):
        # win, then stop draw 0.3 < 0.5 ends the phase with no extra round
        rng = ScriptedRNG(floats=[0.1, 0.3])
        r = simulate_slots(10.0, 1, 50.0, True, rng=rng)
        self.assertEqual(r.rounds_played, 1)
        self.assertEqual(r.extra_rounds_played, 0)
        self.assertEqual(r.stop_reason, STOP_CHOICE)
        self.assertEqual(r.final_balance, 10.0)

    def test_bust_ends_phase(self):
        # win, continue (0.7), lose (0.9) → balance 0 → bust
        rng = ScriptedRNG(floats=[0.1, 0.7, 0.9])
        r = simulate_slots(10.0, 1, 50.0, True, rng=rng)
        self.assertEqual(r.rounds_played, 2)
        self.assertEqual(r.extra_rounds_played, 1)
        self.assertEqual(r.stop_reason, STOP_BUST)
        self.assertEqual(r.final_balance, 0.0)
        self.assertEqual(rng.floats, [])

    def test_continue_then_stop(self):
        # win, continue, win, continue, win, stop
        rng = ScriptedRNG(floats=[0.1, 0.6, 0.2, 0.99, 0.3, 0.0])
        r = simulate_slots(5.0, 1, 50.0, True, rng=rng)
        self.assertEqual(r.rounds_played, 3)
        self.assertEqual(r.extra_rounds_played, 2)
        self.assertEqual(r.final_balance, 15.0)
        self.assertEqual(r.stop_reason, STOP_CHOICE)

    def test_roulette_extra_bets_share_stream(self):
        # spin 5 wins, stop draw 0.8 continues, spin 0 loses → bust
        rng = ScriptedRNG(floats=[0.8], ints=[5, 0])
        r = simulate_roulette(10.0, 1, "european", True, rng=rng)
        self.assertEqual(r.rounds_played, 2)
        self.assertEqual(r.stop_reason, STOP_BUST)

    def test_safety_cap(self):
        r = simulate_slots(1.0, 3, 100.0, True, rng=random.Random(0),
                           stop_probability=0.0, max_extra_rounds=25)
        self.assertEqual(r.extra_rounds_played, 25)
        self.assertEqual(r.rounds_played, 28)
        self.assertEqual(r.stop_reason, STOP_CAP)

    def test_cap_defaults_from_settings(self):
        with patch.object(SimConfig, "MAX_EXTRA_ROUNDS", 7):
            r = simulate_slots(1.0, 1, 100.0, True, rng=random.Random(0), stop_probability=0.0)
        self.assertEqual(r.extra_rounds_played, 7)
        self.assertEqual(r.stop_reason, STOP_CAP)

    def test_always_stop(self):
        r = simulate_slots(1.0, 2, 100.0, True, rng=random.Random(0), stop_probability=1.0)
        self.assertEqual(r.rounds_played, 2)
        self.assertEqual(r.stop_reason, STOP_CHOICE)

    def test_mean_extra_rounds_near_one(self):
        """Quit chance 0.5 per round: about one extra round on average."""
        runs = [simulate_slots(1.0, 1, 100.0, True, rng=random.Random(s)) for s in range(2000)]
        mean_extra = sum(r.extra_rounds_played for r in runs) / len(runs)
        self.assertAlmostEqual(mean_extra, 1.0, delta=0.2)


# ============================================================
# Campaign
# ============================================================

class TestCampaign(unittest.TestCase):

    PARAMS = {"bet": 100.0, "round_count": 10, "win_chance_percent": 50.0,
              "extra_bets_enabled": True}

    def test_totals_match_player_results(self):
        report = run_campaign(5, "slots", self.PARAMS, rng=random.Random(3))
        self.assertIsInstance(report, ConsolidatedReport)
        self.assertEqual(report.player_count, 5)
        self.assertEqual(len(report.results), 5)
        self.assertEqual(report.total_rounds, sum(r.rounds_played for r in report.results))
        self.assertEqual(report.total_player_wins, sum(r.player_wins for r in report.results))
        self.assertEqual(report.total_house_wins, sum(r.house_wins for r in report.results))
        self.assertAlmostEqual(report.total_balance, sum(r.final_balance for r in report.results))
        self.assertAlmostEqual(report.house_edge_observed,
                               report.total_house_wins / report.total_rounds * 100)

    def test_players_draw_from_one_stream(self):
        report = run_campaign(3, GameChoice.SLOTS, self.PARAMS, rng=random.Random(9))
        rng = random.Random(9)
        manual = [simulate_slots(100.0, 10, 50.0, True, rng=rng) for _ in range(3)]
        self.assertEqual(report.results, manual)

    def test_menu_number_and_defaults(self):
        report = run_campaign(2, 2, {"wheel_variant": "american"}, rng=random.Random(1))
        self.assertEqual(report.game_type, "roulette")
        self.assertEqual(report.parameters["wheel_variant"], "american")
        self.assertEqual(report.parameters["bet"], SimConfig.BET_AMOUNT)
        for r in report.results:
            self.assertGreaterEqual(r.rounds_played, SimConfig.ROUNDS)

    def test_on_player_callback_order(self):
        seen = []
        run_campaign(4, "roulette", {"round_count": 3}, rng=random.Random(2),
                     on_player=lambda i, r: seen.append((i, r.rounds_played >= 3)))
        self.assertEqual(seen, [(1, True), (2, True), (3, True), (4, True)])

    def test_rejects_invalid_input_before_drawing(self):
        cases = [
            (0, "slots", self.PARAMS),
            (-3, "slots", self.PARAMS),
            (2, "poker", self.PARAMS),
            (2, "slots", {"bet": 0}),
            (2, "slots", {"win_chance": 40}),
            (2, "roulette", {"wheel_variant": "french"}),
        ]
        for players, game, params in cases:
            calls = []
            with self.assertRaises(InvalidConfiguration, msg=f"{players} {game} {params}"):
                run_campaign(players, game, params, rng=ScriptedRNG(),
                             on_player=lambda i, r: calls.append(i))
            self.assertEqual(calls, [])

    def test_degenerate_report(self):
        report = run_campaign(3, "slots", {"round_count": 0}, rng=ScriptedRNG())
        self.assertTrue(report.degenerate)
        self.assertIsNone(report.house_edge_observed)
        self.assertEqual(report.total_rounds, 0)
        self.assertEqual(report.average_loss_per_player, 0.0)
        self.assertIsNone(report.to_dict()["house_edge_observed_pct"])

    def test_collective_profit_has_no_average_loss(self):
        report = run_campaign(3, "slots", {"win_chance_percent": 100.0, "round_count": 2},
                              rng=random.Random(0))
        self.assertTrue(report.players_profited)
        self.assertIsNone(report.average_loss_per_player)
        self.assertEqual(report.house_edge_observed, 0.0)

    def test_average_loss_per_player(self):
        report = run_campaign(4, "slots", {"bet": 50.0, "win_chance_percent": 0.0,
                                           "round_count": 3}, rng=random.Random(0))
        self.assertEqual(report.total_balance, -600.0)
        self.assertEqual(report.average_loss_per_player, 150.0)
        self.assertEqual(report.house_edge_observed, 100.0)

    def test_json_report(self):
        report = run_campaign(2, "roulette", {"round_count": 5}, rng=random.Random(4))
        data = json.loads(report.to_json())
        self.assertEqual(data["player_count"], 2)
        self.assertEqual(data["totals"]["rounds"], report.total_rounds)
        self.assertEqual(len(data["players"]), 2)
        self.assertIn("player_losses", data["players"][0])

    def test_seeded_campaign_reproducible(self):
        a = run_campaign(10, "roulette", {"extra_bets_enabled": True}, rng=SimConfig.make_rng(77))
        b = run_campaign(10, "roulette", {"extra_bets_enabled": True}, rng=SimConfig.make_rng(77))
        self.assertEqual(a.results, b.results)

    def test_report_add(self):
        report = ConsolidatedReport(game_type="slots")
        report.add(SimulationResult(final_balance=-200.0, player_wins=4, house_wins=5, rounds_played=9))
        report.add(SimulationResult(final_balance=400.0, player_wins=6, house_wins=4, rounds_played=10))
        self.assertEqual(report.player_count, 2)
        self.assertEqual(report.total_balance, 200.0)
        self.assertEqual(report.total_rounds, 19)
        self.assertTrue(report.generated_at)


# ============================================================
# Schema Validation
# ============================================================

class TestSchemaValidation(unittest.TestCase):

    def test_game_registry(self):
        self.assertEqual(GAME_TYPES, ["slots", "roulette"])
        self.assertIsInstance(get_simulator("slots", {"win_chance_percent": 30}), SlotsSimulator)
        sim = get_simulator("Roulette", {"wheel_variant": "american"})
        self.assertEqual(sim.slot_count, 38)

    def test_resolve_game(self):
        self.assertEqual(resolve_game("1"), GameChoice.SLOTS)
        self.assertEqual(resolve_game(2), GameChoice.ROULETTE)
        self.assertEqual(resolve_game("SLOTS"), GameChoice.SLOTS)
        with self.assertRaises(InvalidConfiguration):
            resolve_game("3")

    def test_error_carries_field_details(self):
        with self.assertRaises(InvalidConfiguration) as ctx:
            validate_params(SlotsParams, {"bet": -1, "win_chance_percent": 120})
        locs = {err["loc"][0] for err in ctx.exception.errors}
        self.assertEqual(locs, {"bet", "win_chance_percent"})
        self.assertIn("bet", str(ctx.exception))

    def test_unknown_fields_rejected(self):
        with self.assertRaises(InvalidConfiguration):
            validate_params(RouletteParams, {"win_chance_percent": 50})

    def test_non_mapping_rejected(self):
        with self.assertRaises(InvalidConfiguration):
            validate_params(SlotsParams, [("bet", 1)])

    def test_model_passthrough(self):
        params = SlotsParams(bet=5, round_count=2, win_chance_percent=10)
        self.assertIs(validate_params(SlotsParams, params), params)

    def test_none_overrides_keep_defaults(self):
        with patch.object(SimConfig, "BET_AMOUNT", 42.0):
            params = validate_params(SlotsParams, {}, bet=None, round_count=3)
        self.assertEqual(params.bet, 42.0)
        self.assertEqual(params.round_count, 3)

    def test_none_stop_probability_uses_settings(self):
        with patch.object(SimConfig, "STOP_PROBABILITY", 0.25):
            params = SlotsParams(stop_probability=None)
        self.assertEqual(params.stop_probability, 0.25)

    def test_params_json_round_trip(self):
        params = RouletteParams(wheel_variant="AMERICAN", bet=10, round_count=1)
        data = json.loads(params.model_dump_json())
        self.assertEqual(data["wheel_variant"], "american")


# ============================================================
# Settings
# ============================================================

class TestSettings(unittest.TestCase):

    def test_optional_int(self):
        self.assertIsNone(_optional_int(None))
        self.assertIsNone(_optional_int("  "))
        self.assertEqual(_optional_int("12"), 12)

    def test_make_rng_seeded(self):
        self.assertEqual(SimConfig.make_rng(3).random(), random.Random(3).random())

    def test_make_rng_uses_configured_seed(self):
        with patch.object(SimConfig, "SEED", 11):
            self.assertEqual(SimConfig.make_rng().random(), random.Random(11).random())

    def test_as_dict(self):
        d = SimConfig.as_dict()
        for key in ("bet_amount", "rounds", "slots_win_chance", "stop_probability",
                    "max_extra_rounds", "seed", "log_level"):
            self.assertIn(key, d)


# ============================================================
# Main
# ============================================================

if __name__ == "__main__":
    # Configure logging to suppress noise during tests
    import logging
    logging.disable(logging.WARNING)

    unittest.main(verbosity=2)

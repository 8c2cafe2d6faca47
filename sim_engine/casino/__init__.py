"""
CASINOSIM — Casino Simulation Engine

Even-money casino games simulated player by player.
Each game exposes: win_chance_percent, play_round(rng) and simulate().

Usage:
    from sim_engine.casino import simulate_slots, simulate_roulette, run_campaign
    result = simulate_slots(200.0, 10, 48.5, extra_bets_enabled=True)
    report = run_campaign(10, "roulette", {"wheel_variant": "european"})
"""

from config.casino_schema import (
    GameChoice, InvalidConfiguration, WheelVariant, params_for_game, resolve_game,
)
from sim_engine.casino.base import BaseCasinoSimulator, SimulationResult
from sim_engine.casino.slots import SlotsSimulator, simulate_slots
from sim_engine.casino.roulette import RouletteSimulator, simulate_roulette
from sim_engine.casino.campaign import ConsolidatedReport, run_campaign

GAME_SIMULATORS = {
    GameChoice.SLOTS: SlotsSimulator,
    GameChoice.ROULETTE: RouletteSimulator,
}

GAME_TYPES = [g.value for g in GAME_SIMULATORS]


def get_simulator(game, params=None) -> BaseCasinoSimulator:
    """Get the simulator for a game, configured from its params model or mapping."""
    game = resolve_game(game)
    return GAME_SIMULATORS[game].from_params(params_for_game(game, params))


__all__ = [
    "BaseCasinoSimulator", "ConsolidatedReport", "GameChoice", "InvalidConfiguration",
    "RouletteSimulator", "SimulationResult", "SlotsSimulator", "WheelVariant",
    "GAME_SIMULATORS", "GAME_TYPES", "get_simulator", "run_campaign",
    "simulate_roulette", "simulate_slots",
]

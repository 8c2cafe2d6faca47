"""Slot Machine — fixed win chance per spin, even-money payout."""
from typing import Optional

from config.casino_schema import InvalidConfiguration, SlotsParams, validate_params
from sim_engine.casino.base import BaseCasinoSimulator, SimulationResult


class SlotsSimulator(BaseCasinoSimulator):
    game_type = "slots"
    display_name = "Slot Machine"

    def __init__(self, win_chance_percent: float, stop_probability: Optional[float] = None,
                 max_extra_rounds: Optional[int] = None):
        super().__init__(stop_probability=stop_probability, max_extra_rounds=max_extra_rounds)
        if not 0.0 <= win_chance_percent <= 100.0:
            raise InvalidConfiguration(
                f"win_chance_percent must be within [0, 100], got {win_chance_percent}")
        self._win_chance = float(win_chance_percent)

    @classmethod
    def from_params(cls, params: SlotsParams) -> "SlotsSimulator":
        return cls(params.win_chance_percent, stop_probability=params.stop_probability,
                   max_extra_rounds=params.max_extra_rounds)

    @property
    def win_chance_percent(self) -> float:
        return self._win_chance

    def play_round(self, rng) -> bool:
        return rng.random() * 100 < self._win_chance


def simulate_slots(bet: float, round_count: int, win_chance_percent: float,
                   extra_bets_enabled: bool, rng=None, stop_probability: Optional[float] = None,
                   max_extra_rounds: Optional[int] = None) -> SimulationResult:
    """Simulate one player at the slot machine.

    Raises InvalidConfiguration for a non-positive or non-finite bet, a
    negative round count or a win chance outside [0, 100].
    """
    params = validate_params(SlotsParams, {
        "bet": bet,
        "round_count": round_count,
        "win_chance_percent": win_chance_percent,
        "extra_bets_enabled": extra_bets_enabled,
        "stop_probability": stop_probability,
        "max_extra_rounds": max_extra_rounds,
    })
    return SlotsSimulator.from_params(params).simulate_params(params, rng=rng)

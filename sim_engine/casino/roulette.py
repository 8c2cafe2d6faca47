"""Roulette — European (37 pockets) or American (38), player always bets 1-18."""
from typing import Optional, Union

from config.casino_schema import RouletteParams, WheelVariant, resolve_wheel, validate_params
from sim_engine.casino.base import BaseCasinoSimulator, SimulationResult

WHEEL_SLOTS = {
    WheelVariant.EUROPEAN: 37,   # 0-36
    WheelVariant.AMERICAN: 38,   # 0, 00, 1-36; index 37 stands in for 00
}

WHEEL_LABELS = {
    WheelVariant.EUROPEAN: "European (37 numbers, 0-36)",
    WheelVariant.AMERICAN: "American (38 numbers, 0, 00, 1-36)",
}

LOW_BET = (1, 18)
WINNING_NUMBERS = LOW_BET[1] - LOW_BET[0] + 1


def real_win_chance(variant: Union[str, WheelVariant]) -> float:
    """Win chance of the 1-18 bet, in percent."""
    return WINNING_NUMBERS / WHEEL_SLOTS[resolve_wheel(variant)] * 100


def house_edge_percent(variant: Union[str, WheelVariant]) -> float:
    """Expected loss per unit staked on an even-money bet, in percent."""
    slots = WHEEL_SLOTS[resolve_wheel(variant)]
    return (slots - 2 * WINNING_NUMBERS) / slots * 100


class RouletteSimulator(BaseCasinoSimulator):
    game_type = "roulette"
    display_name = "Roulette"

    def __init__(self, wheel_variant: Union[str, WheelVariant] = WheelVariant.EUROPEAN,
                 stop_probability: Optional[float] = None, max_extra_rounds: Optional[int] = None):
        super().__init__(stop_probability=stop_probability, max_extra_rounds=max_extra_rounds)
        self.wheel_variant = resolve_wheel(wheel_variant)
        self.slot_count = WHEEL_SLOTS[self.wheel_variant]
        self.display_name = f"Roulette {self.wheel_variant.value.title()}"

    @classmethod
    def from_params(cls, params: RouletteParams) -> "RouletteSimulator":
        return cls(params.wheel_variant, stop_probability=params.stop_probability,
                   max_extra_rounds=params.max_extra_rounds)

    @property
    def win_chance_percent(self) -> float:
        return WINNING_NUMBERS / self.slot_count * 100

    @property
    def house_edge_percent(self) -> float:
        return house_edge_percent(self.wheel_variant)

    @property
    def label(self) -> str:
        return WHEEL_LABELS[self.wheel_variant]

    def play_round(self, rng) -> bool:
        pocket = rng.randrange(self.slot_count)
        return LOW_BET[0] <= pocket <= LOW_BET[1]

    def get_metadata(self) -> dict:
        meta = super().get_metadata()
        meta.update({
            "wheel_variant": self.wheel_variant.value,
            "slot_count": self.slot_count,
            "house_edge_percent": round(self.house_edge_percent, 4),
        })
        return meta


def simulate_roulette(bet: float, round_count: int, wheel_variant: Union[str, WheelVariant],
                      extra_bets_enabled: bool, rng=None, stop_probability: Optional[float] = None,
                      max_extra_rounds: Optional[int] = None) -> SimulationResult:
    """Simulate one player at the roulette table.

    An unknown wheel_variant (e.g. "french") raises InvalidConfiguration
    before any spin.
    """
    params = validate_params(RouletteParams, {
        "bet": bet,
        "round_count": round_count,
        "wheel_variant": wheel_variant,
        "extra_bets_enabled": extra_bets_enabled,
        "stop_probability": stop_probability,
        "max_extra_rounds": max_extra_rounds,
    })
    return RouletteSimulator.from_params(params).simulate_params(params, rng=rng)

"""
CASINOSIM — Simulation Parameter Schema

Validated parameter models for every simulator entry point. Anything a caller
passes in (function arguments, CLI flags, a params dict) goes through one of
these models before a single random draw is made, so a bad stake, an
out-of-range probability or an unknown wheel never produces a partial run.

Usage:
    from config.casino_schema import SlotsParams, validate_params
    params = validate_params(SlotsParams, {"bet": 200, "round_count": 10,
                                           "win_chance_percent": 48.5})
    json_str = params.model_dump_json(indent=2)
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Mapping, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from config.settings import SimConfig


class InvalidConfiguration(ValueError):
    """Simulation parameters rejected before the run started."""

    def __init__(self, message: str, errors: Optional[list] = None):
        super().__init__(message)
        self.errors = errors or []


# ═══════════════════════════════════════════════════════════════
# Enums
# ═══════════════════════════════════════════════════════════════

class GameChoice(str, Enum):
    SLOTS    = "slots"
    ROULETTE = "roulette"


class WheelVariant(str, Enum):
    EUROPEAN = "european"   # 0-36
    AMERICAN = "american"   # 0, 00, 1-36


# Console menu numbers accepted in place of the names
GAME_MENU = {"1": GameChoice.SLOTS, "2": GameChoice.ROULETTE}
WHEEL_MENU = {"1": WheelVariant.EUROPEAN, "2": WheelVariant.AMERICAN}


def _coerce_choice(value: Any, enum_cls, menu: dict):
    if isinstance(value, enum_cls) or isinstance(value, bool):
        return value
    if isinstance(value, int):
        value = str(value)
    if isinstance(value, str):
        key = value.strip().lower()
        return menu.get(key, key)
    return value


def resolve_game(value: Any) -> GameChoice:
    """'slots' / 'roulette' (any case), menu number 1 / 2, or the enum."""
    try:
        return GameChoice(_coerce_choice(value, GameChoice, GAME_MENU))
    except ValueError:
        raise InvalidConfiguration(
            f"Unknown game: {value!r}. Available: {[g.value for g in GameChoice]}") from None


def resolve_wheel(value: Any) -> WheelVariant:
    """'european' / 'american' (any case), menu number 1 / 2, or the enum."""
    try:
        return WheelVariant(_coerce_choice(value, WheelVariant, WHEEL_MENU))
    except ValueError:
        raise InvalidConfiguration(
            f"Unknown wheel variant: {value!r}. Available: {[w.value for w in WheelVariant]}") from None


# ═══════════════════════════════════════════════════════════════
# Parameter Models
# ═══════════════════════════════════════════════════════════════

class BetParams(BaseModel):
    """Stake, round count and extra-bets behaviour shared by every game."""
    model_config = ConfigDict(allow_inf_nan=False, extra="forbid", validate_default=True)

    bet: float = Field(default_factory=lambda: SimConfig.BET_AMOUNT, gt=0)
    round_count: int = Field(default_factory=lambda: SimConfig.ROUNDS, ge=0)
    extra_bets_enabled: bool = False
    stop_probability: float = Field(default_factory=lambda: SimConfig.STOP_PROBABILITY, ge=0.0, le=1.0)
    max_extra_rounds: Optional[int] = Field(default_factory=lambda: SimConfig.MAX_EXTRA_ROUNDS, ge=1)

    @field_validator("stop_probability", mode="before")
    @classmethod
    def default_stop_probability(cls, v):
        return SimConfig.STOP_PROBABILITY if v is None else v

    @field_validator("max_extra_rounds", mode="before")
    @classmethod
    def default_max_extra_rounds(cls, v):
        return SimConfig.MAX_EXTRA_ROUNDS if v is None else v


class SlotsParams(BetParams):
    """Fixed-odds slot machine."""
    win_chance_percent: float = Field(default_factory=lambda: SimConfig.SLOTS_WIN_CHANCE, ge=0.0, le=100.0)


class RouletteParams(BetParams):
    """Roulette, always betting the low range 1-18."""
    wheel_variant: WheelVariant = WheelVariant.EUROPEAN

    @field_validator("wheel_variant", mode="before")
    @classmethod
    def normalize_variant(cls, v):
        return _coerce_choice(v, WheelVariant, WHEEL_MENU)


class CampaignConfig(BaseModel):
    """Who plays what: the multi-player driver's own inputs."""
    model_config = ConfigDict(extra="forbid")

    player_count: int = Field(gt=0)
    game: GameChoice

    @field_validator("game", mode="before")
    @classmethod
    def normalize_game(cls, v):
        return _coerce_choice(v, GameChoice, GAME_MENU)


GAME_PARAMS: dict[GameChoice, type[BetParams]] = {
    GameChoice.SLOTS: SlotsParams,
    GameChoice.ROULETTE: RouletteParams,
}

ParamsInput = Union[Mapping[str, Any], BaseModel, None]


# ═══════════════════════════════════════════════════════════════
# Validation
# ═══════════════════════════════════════════════════════════════

def _format_errors(errors: list) -> str:
    parts = []
    for err in errors:
        loc = ".".join(str(p) for p in err.get("loc", ())) or "value"
        parts.append(f"{loc}: {err.get('msg', 'invalid')}")
    return "; ".join(parts)


def validate_params(model_cls, data: ParamsInput = None, **overrides):
    """Build `model_cls` from a mapping/model plus keyword overrides.

    Keyword overrides whose value is None are dropped so the model default
    (usually a SimConfig setting) applies. Raises InvalidConfiguration.
    """
    if isinstance(data, model_cls) and not overrides:
        return data
    if isinstance(data, BaseModel):
        data = data.model_dump()
    elif data is not None and not isinstance(data, Mapping):
        raise InvalidConfiguration(
            f"{model_cls.__name__} expects a mapping of parameters, got {type(data).__name__}")

    fields = dict(data or {})
    fields.update({k: v for k, v in overrides.items() if v is not None})
    try:
        return model_cls(**fields)
    except ValidationError as e:
        errors = e.errors(include_url=False)
        raise InvalidConfiguration(
            f"Invalid {model_cls.__name__}: {_format_errors(errors)}", errors=errors) from e


def params_for_game(game: GameChoice, data: ParamsInput = None) -> BetParams:
    """Validate game_params against the model for the chosen game."""
    return validate_params(GAME_PARAMS[game], data)

"""
CASINOSIM — Base Casino Simulator

Shared betting loop for the fixed-stake games. A player stakes the same
amount every round: an initial block of `round_count` rounds, then (if extra
bets are on and the player is ahead) an open-ended continuation where, before
each round, the player may walk away.
"""

import logging
import math
from abc import ABC, abstractmethod
from dataclasses import asdict, dataclass
from typing import Optional

from config.casino_schema import BetParams, InvalidConfiguration
from config.settings import SimConfig

logger = logging.getLogger("casinosim.engine")

# Why the extra-bets phase ended
STOP_CHOICE = "choice"   # the stop draw came up
STOP_BUST   = "bust"     # balance fell to zero or below
STOP_CAP    = "cap"      # max_extra_rounds reached


@dataclass(frozen=True)
class SimulationResult:
    """Outcome of one player's session at one game."""
    final_balance: float
    player_wins: int
    house_wins: int
    rounds_played: int
    game_type: str = ""
    bet: float = 0.0
    win_chance_percent: float = 0.0
    extra_rounds_played: int = 0
    stop_reason: Optional[str] = None  # None when the extra phase never ran

    @property
    def initial_rounds_played(self) -> int:
        return self.rounds_played - self.extra_rounds_played

    @property
    def player_losses(self) -> float:
        """Money the player handed over on lost rounds."""
        return self.house_wins * self.bet

    @property
    def casino_net_profit(self) -> float:
        return 0.0 - self.final_balance

    @property
    def player_win_rate(self) -> Optional[float]:
        if self.rounds_played == 0:
            return None
        return self.player_wins / self.rounds_played

    def to_dict(self) -> dict:
        d = asdict(self)
        d["player_losses"] = round(self.player_losses, 2)
        d["casino_net_profit"] = round(self.casino_net_profit, 2)
        return d


class BaseCasinoSimulator(ABC):
    """Abstract base for the even-money casino games."""

    game_type: str = "base"
    display_name: str = "Base Game"

    def __init__(self, stop_probability: Optional[float] = None,
                 max_extra_rounds: Optional[int] = None):
        self.stop_probability = (SimConfig.STOP_PROBABILITY
                                 if stop_probability is None else stop_probability)
        # None here means uncapped; callers wanting the configured cap go through from_params
        self.max_extra_rounds = max_extra_rounds
        if not 0.0 <= self.stop_probability <= 1.0:
            raise InvalidConfiguration(
                f"stop_probability must be within [0, 1], got {self.stop_probability}")
        if self.max_extra_rounds is not None and self.max_extra_rounds < 1:
            raise InvalidConfiguration(
                f"max_extra_rounds must be at least 1, got {self.max_extra_rounds}")

    @property
    @abstractmethod
    def win_chance_percent(self) -> float:
        """Per-round chance of a player win, in percent."""
        ...

    @abstractmethod
    def play_round(self, rng) -> bool:
        """Resolve one round. True = player wins."""
        ...

    def simulate(self, bet: float, round_count: int, extra_bets_enabled: bool,
                 rng=None) -> SimulationResult:
        """Run one player's session.

        `rng` needs `random()` and `randrange(n)`; a fresh stream from
        SimConfig is used when omitted.
        """
        if (isinstance(bet, bool) or not isinstance(bet, (int, float))
                or not math.isfinite(bet) or bet <= 0):
            raise InvalidConfiguration(f"bet must be a positive finite amount, got {bet!r}")
        if isinstance(round_count, bool) or not isinstance(round_count, int) or round_count < 0:
            raise InvalidConfiguration(
                f"round_count must be a non-negative integer, got {round_count!r}")
        if rng is None:
            rng = SimConfig.make_rng()

        # Balance is always net * bet so it stays an exact multiple of the stake
        player_wins = 0
        house_wins = 0
        for _ in range(round_count):
            if self.play_round(rng):
                player_wins += 1
            else:
                house_wins += 1

        extra_rounds = 0
        stop_reason = None
        if extra_bets_enabled and player_wins > house_wins:
            logger.debug(f"{self.game_type}: ahead by {player_wins - house_wins} after "
                         f"{round_count} rounds, entering extra bets")
            while True:
                if player_wins <= house_wins:
                    stop_reason = STOP_BUST
                    break
                if self.max_extra_rounds is not None and extra_rounds >= self.max_extra_rounds:
                    stop_reason = STOP_CAP
                    logger.warning(f"{self.game_type}: extra bets hit the "
                                   f"{self.max_extra_rounds}-round cap")
                    break
                # Quit decision comes before the round is played
                if rng.random() < self.stop_probability:
                    stop_reason = STOP_CHOICE
                    break
                extra_rounds += 1
                if self.play_round(rng):
                    player_wins += 1
                else:
                    house_wins += 1

        return SimulationResult(
            final_balance=(player_wins - house_wins) * bet,
            player_wins=player_wins,
            house_wins=house_wins,
            rounds_played=round_count + extra_rounds,
            game_type=self.game_type,
            bet=bet,
            win_chance_percent=self.win_chance_percent,
            extra_rounds_played=extra_rounds,
            stop_reason=stop_reason,
        )

    def simulate_params(self, params: BetParams, rng=None) -> SimulationResult:
        return self.simulate(params.bet, params.round_count, params.extra_bets_enabled, rng=rng)

    def get_metadata(self) -> dict:
        """Return game metadata for display."""
        return {
            "game_type": self.game_type,
            "display_name": self.display_name,
            "win_chance_percent": round(self.win_chance_percent, 4),
            "stop_probability": self.stop_probability,
            "max_extra_rounds": self.max_extra_rounds,
        }

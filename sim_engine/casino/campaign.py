"""
CASINOSIM — Multi-Player Campaign

Runs the chosen game once per simulated player, every player drawing from
the same random stream, and folds the per-player results into one report.

Usage:
    from sim_engine.casino.campaign import run_campaign
    report = run_campaign(25, "roulette", {"wheel_variant": "american",
                                           "extra_bets_enabled": True})
    print(report.to_json())
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable, Optional

from config.casino_schema import CampaignConfig, ParamsInput, params_for_game, validate_params
from config.settings import SimConfig
from sim_engine.casino.base import SimulationResult

logger = logging.getLogger("casinosim.campaign")


@dataclass
class ConsolidatedReport:
    """Totals across every player of a campaign."""
    game_type: str
    player_count: int = 0
    results: list[SimulationResult] = field(default_factory=list)
    total_balance: float = 0.0
    total_player_wins: int = 0
    total_house_wins: int = 0
    total_rounds: int = 0
    parameters: dict = field(default_factory=dict)
    generated_at: str = ""

    def __post_init__(self):
        if not self.generated_at:
            self.generated_at = datetime.now(timezone.utc).isoformat()

    def add(self, result: SimulationResult):
        self.results.append(result)
        self.player_count = len(self.results)
        self.total_balance += result.final_balance
        self.total_player_wins += result.player_wins
        self.total_house_wins += result.house_wins
        self.total_rounds += result.rounds_played

    @property
    def degenerate(self) -> bool:
        """No round was played, so no rate can be derived."""
        return self.total_rounds == 0

    @property
    def house_edge_observed(self) -> Optional[float]:
        """Share of rounds the house won, in percent."""
        if self.degenerate:
            return None
        return self.total_house_wins / self.total_rounds * 100

    @property
    def players_profited(self) -> bool:
        return self.total_balance > 0

    @property
    def average_loss_per_player(self) -> Optional[float]:
        if self.players_profited or self.player_count == 0:
            return None
        return abs(self.total_balance) / self.player_count

    @property
    def total_extra_rounds(self) -> int:
        return sum(r.extra_rounds_played for r in self.results)

    def to_dict(self) -> dict:
        edge = self.house_edge_observed
        avg_loss = self.average_loss_per_player
        return {
            "game_type": self.game_type,
            "generated_at": self.generated_at,
            "player_count": self.player_count,
            "parameters": self.parameters,
            "totals": {
                "balance": round(self.total_balance, 2),
                "player_wins": self.total_player_wins,
                "house_wins": self.total_house_wins,
                "rounds": self.total_rounds,
                "extra_rounds": self.total_extra_rounds,
            },
            "house_edge_observed_pct": None if edge is None else round(edge, 4),
            "average_loss_per_player": None if avg_loss is None else round(avg_loss, 2),
            "players_profited": self.players_profited,
            "degenerate": self.degenerate,
            "players": [r.to_dict() for r in self.results],
        }

    def to_json(self, indent: int = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent)


def run_campaign(player_count: int, game_choice, game_params: ParamsInput = None,
                 rng=None, on_player: Optional[Callable[[int, SimulationResult], None]] = None,
                 ) -> ConsolidatedReport:
    """Simulate `player_count` independent players at one game.

    Args:
        player_count: Number of players, > 0
        game_choice: "slots" / "roulette", a GameChoice, or menu number 1 / 2
        game_params: Mapping or params model for the chosen game; missing
            fields fall back to SimConfig defaults
        rng: Shared random stream (SimConfig.make_rng() when omitted)
        on_player: Called as on_player(index, result) after each player, index from 1

    Raises:
        InvalidConfiguration: before any player is simulated
    """
    from sim_engine.casino import get_simulator

    config = validate_params(CampaignConfig, {"player_count": player_count, "game": game_choice})
    params = params_for_game(config.game, game_params)
    simulator = get_simulator(config.game, params)
    if rng is None:
        rng = SimConfig.make_rng()

    logger.info(f"Campaign: {config.player_count} player(s) at {simulator.display_name}, "
                f"bet={params.bet} rounds={params.round_count} extra_bets={params.extra_bets_enabled}")

    report = ConsolidatedReport(game_type=config.game.value,
                                parameters=params.model_dump(mode="json"))
    for index in range(1, config.player_count + 1):
        result = simulator.simulate_params(params, rng=rng)
        report.add(result)
        logger.debug(f"Player {index}: balance={result.final_balance:.2f} "
                     f"rounds={result.rounds_played} stop={result.stop_reason}")
        if on_player is not None:
            on_player(index, result)

    if report.degenerate:
        logger.warning("Campaign played zero rounds; house edge is undefined")
    return report

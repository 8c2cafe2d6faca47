"""
CASINOSIM — Simulation Defaults

Every tunable of the simulator reads from the environment (or a local .env)
with the house defaults below as fallback:

    CASINOSIM_BET_AMOUNT         stake per round                  (200.0)
    CASINOSIM_ROUNDS             initial rounds per player        (10)
    CASINOSIM_SLOTS_WIN_CHANCE   slot machine win chance, percent (48.5)
    CASINOSIM_STOP_PROBABILITY   per-round quit chance, extra bets (0.5)
    CASINOSIM_MAX_EXTRA_ROUNDS   extra-bets safety cap, 0 = none  (100000)
    CASINOSIM_SEED               RNG seed, unset = OS entropy
    CASINOSIM_LOG_LEVEL          CLI log level                    (WARNING)
"""

import os
import random
from typing import Optional

from dotenv import load_dotenv

load_dotenv()


def _optional_int(raw: Optional[str]) -> Optional[int]:
    if raw is None or not raw.strip():
        return None
    return int(raw)


class SimConfig:

    # --- Stakes & rounds ---
    BET_AMOUNT = float(os.getenv("CASINOSIM_BET_AMOUNT", "200.0"))
    ROUNDS = int(os.getenv("CASINOSIM_ROUNDS", "10"))
    SLOTS_WIN_CHANCE = float(os.getenv("CASINOSIM_SLOTS_WIN_CHANCE", "48.5"))  # House keeps a 3% edge

    # --- Extra bets ---
    STOP_PROBABILITY = float(os.getenv("CASINOSIM_STOP_PROBABILITY", "0.5"))
    # 0 disables the cap; the extra phase then only ends on quit or bust
    MAX_EXTRA_ROUNDS = _optional_int(os.getenv("CASINOSIM_MAX_EXTRA_ROUNDS", "100000")) or None

    # --- Runtime ---
    SEED = _optional_int(os.getenv("CASINOSIM_SEED"))
    LOG_LEVEL = os.getenv("CASINOSIM_LOG_LEVEL", "WARNING").upper()

    @classmethod
    def make_rng(cls, seed: Optional[int] = None) -> random.Random:
        """Return the single random stream a run draws from.
        An explicit seed wins over CASINOSIM_SEED."""
        return random.Random(seed if seed is not None else cls.SEED)

    @classmethod
    def as_dict(cls) -> dict:
        return {
            "bet_amount": cls.BET_AMOUNT,
            "rounds": cls.ROUNDS,
            "slots_win_chance": cls.SLOTS_WIN_CHANCE,
            "stop_probability": cls.STOP_PROBABILITY,
            "max_extra_rounds": cls.MAX_EXTRA_ROUNDS,
            "seed": cls.SEED,
            "log_level": cls.LOG_LEVEL,
        }

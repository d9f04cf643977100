"""Single-elimination bracket ("이상형 월드컵") state machine.

The engine is seeded once with a shuffled subset of candidates and then only
moves forward on ``pick``. Each pick either advances to the next pair of the
current round, promotes the round's winners to a new round, or finishes the
tournament. State is exposed as immutable ``BracketState`` snapshots.
"""

from __future__ import annotations

import math
import random
import threading
from typing import List, Optional, Sequence, Tuple, Union

from models import BracketState, Candidate, MatchResult

TOURNAMENT_SIZES: Tuple[int, ...] = (4, 8, 16, 32, 64)

_ROUND_NAMES = {1: "결승전", 2: "준결승", 3: "8강", 4: "16강", 5: "32강", 6: "64강"}


class InsufficientCandidates(ValueError):
    def __init__(self, required: int, available: int) -> None:
        super().__init__(
            f"{required}강을 진행하기에 음식점이 부족합니다. (필요: {required}개, 발견: {available}개) "
            "반경을 늘리거나 토너먼트 규모를 줄여보세요."
        )
        self.required = required
        self.available = available


class InvalidChoice(ValueError):
    pass


def validate_size(size: int) -> int:
    if not isinstance(size, int) or isinstance(size, bool) or size not in TOURNAMENT_SIZES:
        raise ValueError(f"tournament size must be one of {list(TOURNAMENT_SIZES)}, got {size}")
    return size


def available_sizes(count: int) -> List[int]:
    return [s for s in TOURNAMENT_SIZES if s <= count]


def round_name(size: int, round_number: int) -> str:
    remaining = int(math.log2(size)) - round_number + 1
    return _ROUND_NAMES.get(remaining, f"{2 ** remaining}강")


class BracketEngine:
    def __init__(self, pool: Sequence[Candidate], size: int, rng: Optional[random.Random] = None) -> None:
        self.size = validate_size(size)
        if len(pool) < size:
            raise InsufficientCandidates(size, len(pool))
        self._pool: Tuple[Candidate, ...] = tuple(pool)
        self._rng = rng or random.Random()
        # picks and restarts may arrive from concurrent request threads
        self._lock = threading.RLock()
        self._seed()

    @classmethod
    def seed(cls, candidates: Sequence[Candidate], size: int, rng: Optional[random.Random] = None) -> "BracketEngine":
        return cls(candidates, size, rng=rng)

    def _seed(self) -> None:
        shuffled = list(self._pool)
        self._rng.shuffle(shuffled)
        self._start(shuffled[: self.size])

    def _start(self, entrants: List[Candidate]) -> None:
        self._entrants: Tuple[Candidate, ...] = tuple(entrants)
        self._current_round: Tuple[Candidate, ...] = self._entrants
        self._pair_index = 0
        self._round_number = 1
        self._winners: Tuple[Candidate, ...] = ()
        self._champion: Optional[Candidate] = None
        self._history: Tuple[MatchResult, ...] = ()

    def restart(self, rng: Optional[random.Random] = None) -> BracketState:
        """Reshuffle the original pool and start again from round 1."""
        with self._lock:
            if rng is not None:
                self._rng = rng
            self._seed()
            return self.state

    @property
    def entrants(self) -> Tuple[Candidate, ...]:
        """Round-1 line-up, in bracket order."""
        return self._entrants

    @property
    def active_pair(self) -> Optional[Tuple[Candidate, Candidate]]:
        if self._champion is not None:
            return None
        i = self._pair_index
        return (self._current_round[i], self._current_round[i + 1])

    @property
    def state(self) -> BracketState:
        with self._lock:
            return BracketState(
                size=self.size,
                round_number=self._round_number,
                round_name=round_name(self.size, self._round_number),
                current_round=self._current_round,
                pair_index=self._pair_index,
                winners=self._winners,
                active_pair=self.active_pair,
                champion=self._champion,
                history=self._history,
            )

    def pick(self, choice: Union[Candidate, str]) -> BracketState:
        with self._lock:
            pair = self.active_pair
            if pair is None:
                raise InvalidChoice("tournament already finished")
            choice_id = choice if isinstance(choice, str) else choice.id
            if choice_id == pair[0].id:
                chosen, other = pair
            elif choice_id == pair[1].id:
                other, chosen = pair
            else:
                raise InvalidChoice(f"{choice_id!r} is not in the active pair")

            winners = self._winners + (chosen,)
            self._history = self._history + (MatchResult(self._round_number, chosen, other),)
            next_index = self._pair_index + 2

            if next_index < len(self._current_round):
                self._winners = winners
                self._pair_index = next_index
            elif len(winners) == 1:
                self._winners = winners
                self._champion = chosen
            else:
                self._current_round = winners
                self._pair_index = 0
                self._round_number += 1
                self._winners = ()
            return self.state

from __future__ import annotations

import logging
import random
from typing import Sequence

from ..errors import AssignmentExhausted, ConstraintViolation


logger = logging.getLogger(__name__)

MAX_ATTEMPTS = 100


class DerangementAssigner:
    """
    Pairs every giver with exactly one receiver, nobody with themselves.

    Draws a uniform Fisher-Yates shuffle of the exchange ids and rejects it
    when any position is a fixed point, up to `max_attempts` draws.
    """

    def __init__(self, rng: random.Random | None = None, max_attempts: int = MAX_ATTEMPTS):
        self._rng = rng if rng is not None else random.SystemRandom()
        self.max_attempts = max_attempts

    def _shuffled(self, items: list[str]) -> list[str]:
        shuffled = items[:]
        for i in range(len(shuffled) - 1, 0, -1):
            j = self._rng.randrange(i + 1)
            shuffled[i], shuffled[j] = shuffled[j], shuffled[i]
        return shuffled

    def assign_ids(self, exchange_ids: Sequence[str]) -> list[tuple[str, str]]:
        givers = list(exchange_ids)
        if len(givers) < 2:
            raise ConstraintViolation("Need at least 2 participants")
        if len(set(givers)) != len(givers):
            raise ConstraintViolation("Exchange ids must be unique")

        for attempt in range(1, self.max_attempts + 1):
            receivers = self._shuffled(givers)
            if all(g != r for g, r in zip(givers, receivers)):
                logger.debug("Derangement of %d found on attempt %d", len(givers), attempt)
                return list(zip(givers, receivers))

        raise AssignmentExhausted(
            f"Could not create valid assignments after {self.max_attempts} attempts"
        )

    def assign(self, roster: Sequence) -> list[tuple[str, str]]:
        """roster: participants carrying an `exchange_id` attribute."""
        return self.assign_ids([p.exchange_id for p in roster])

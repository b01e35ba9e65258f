"""
Mind state confirmation

This module applies the change cooldown and tier-merge rules to candidate
states produced by an external classifier. A new identity is only accepted
once the cooldown from the last accepted transition has run out; updates
to the held state refine confidence and tier without any cooldown.
"""

import logging
from dataclasses import replace
from enum import Enum
from typing import Optional

from ..core.data_types import MindState
from ..core.config import STATE_CHANGE_COOLDOWN_MS

INITIAL_LABEL = "Initializing..."


class Decision(Enum):
    ACCEPTED = "accepted"    # identity changed
    REFINED = "refined"      # same identity, confidence/tier updated
    BLOCKED = "blocked"      # identity change rejected during cooldown


class MindStateConfirmer:
    """
    Cooldown-gated holder of the current and challenger mind states

    ``blocked`` is raised when a transition is rejected and stays up until
    an update is applied or a tick finds the cooldown over.
    """

    def __init__(self, cooldown_ms: float = STATE_CHANGE_COOLDOWN_MS):
        self.cooldown_ms = cooldown_ms
        self.reset()

    def reset(self):
        self.current: Optional[MindState] = None
        self.challenger: Optional[MindState] = None
        self.label = INITIAL_LABEL
        self.blocked = False
        self.cooldown_until = 0.0
        self.last_change_at = 0.0

    def propose(self, candidate: MindState, challenger: Optional[MindState],
                now_ms: float) -> Decision:
        """
        Offer a freshly classified state

        Args:
            candidate: Top state from the classifier
            challenger: Runner-up, if any
            now_ms: Current time (ms)

        Returns:
            Decision: What happened to the proposal
        """
        changed = self.current is None or self.current.id != candidate.id

        if changed and now_ms < self.cooldown_until:
            self.blocked = True
            logging.debug(f"Transition to {candidate.id} blocked "
                          f"({self.cooldown_until - now_ms:.0f} ms cooldown left)")
            return Decision.BLOCKED

        if changed:
            previous = self.current.id if self.current else None
            self.current = replace(candidate, entered_at=now_ms, tier_changed_at=now_ms,
                                   dominant_bands=tuple(candidate.dominant_bands))
            self.cooldown_until = now_ms + self.cooldown_ms
            self.last_change_at = now_ms
            decision = Decision.ACCEPTED
            logging.info(f"Mind state: {previous} -> {candidate.id} ({candidate.tier.value})")
        else:
            tier_changed_at = self.current.tier_changed_at
            if candidate.tier != self.current.tier:
                tier_changed_at = now_ms
            self.current = replace(
                self.current,
                confidence=candidate.confidence,
                tier=candidate.tier,
                tier_changed_at=tier_changed_at,
                dominant_bands=tuple(candidate.dominant_bands),
            )
            decision = Decision.REFINED

        if challenger is not None:
            challenger = replace(challenger, dominant_bands=tuple(challenger.dominant_bands))
        self.challenger = challenger
        self.blocked = False
        self.label = f"{self.current.tier.value} - {self.current.id}"
        return decision

    def expire_block(self, now_ms: float) -> bool:
        """Clear the blocked flag once the cooldown is over"""
        if self.blocked and now_ms >= self.cooldown_until:
            self.blocked = False
            return True
        return False

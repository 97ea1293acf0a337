"""Fulfillment state transition table."""

from __future__ import annotations

from enum import StrEnum

from storefront.domain.model import FulfillmentStatus

_FORWARD_PATH: tuple[FulfillmentStatus, ...] = (
    FulfillmentStatus.PROPOSED,
    FulfillmentStatus.RESERVED,
    FulfillmentStatus.PREPARED,
    FulfillmentStatus.COMPLETED,
)


class TransitionDecision(StrEnum):
    APPLY = "apply"
    DUPLICATE = "duplicate"
    IGNORED_INITIAL = "ignored_initial"
    IGNORED_TERMINAL = "ignored_terminal"
    IGNORED_BACKWARD = "ignored_backward"

    @property
    def applies(self) -> bool:
        return self is TransitionDecision.APPLY


def decide_transition(
    current: FulfillmentStatus | None, target: FulfillmentStatus
) -> TransitionDecision:
    """Decide whether moving from ``current`` to ``target`` is accepted.

    ``PROPOSED`` is only ever an initial marker. Terminal states never change.
    Along the main path, skipping ahead is allowed but moving back is not.
    """

    if current == target:
        return TransitionDecision.DUPLICATE
    if target is FulfillmentStatus.PROPOSED:
        return TransitionDecision.IGNORED_INITIAL
    if current is None:
        return TransitionDecision.APPLY
    if current.is_terminal:
        return TransitionDecision.IGNORED_TERMINAL
    if target in _FORWARD_PATH and _FORWARD_PATH.index(target) < _FORWARD_PATH.index(current):
        return TransitionDecision.IGNORED_BACKWARD
    return TransitionDecision.APPLY

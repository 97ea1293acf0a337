from __future__ import annotations

import pytest

from storefront.domain.fulfillment import TransitionDecision, decide_transition
from storefront.domain.model import FulfillmentStatus as Status


@pytest.mark.parametrize(
    ("current", "target"),
    [
        (None, Status.RESERVED),
        (None, Status.COMPLETED),
        (Status.PROPOSED, Status.RESERVED),
        (Status.RESERVED, Status.PREPARED),
        (Status.PREPARED, Status.COMPLETED),
        (Status.RESERVED, Status.COMPLETED),
        (Status.PREPARED, Status.CANCELED),
        (Status.RESERVED, Status.FAILED),
    ],
)
def test_forward_moves_apply(current: Status | None, target: Status) -> None:
    decision = decide_transition(current, target)

    assert decision is TransitionDecision.APPLY
    assert decision.applies


@pytest.mark.parametrize(
    ("current", "target", "expected"),
    [
        (Status.PREPARED, Status.PREPARED, TransitionDecision.DUPLICATE),
        (None, Status.PROPOSED, TransitionDecision.IGNORED_INITIAL),
        (Status.RESERVED, Status.PROPOSED, TransitionDecision.IGNORED_INITIAL),
        (Status.COMPLETED, Status.CANCELED, TransitionDecision.IGNORED_TERMINAL),
        (Status.CANCELED, Status.PREPARED, TransitionDecision.IGNORED_TERMINAL),
        (Status.PREPARED, Status.RESERVED, TransitionDecision.IGNORED_BACKWARD),
    ],
)
def test_invalid_moves_are_ignored(
    current: Status | None, target: Status, expected: TransitionDecision
) -> None:
    decision = decide_transition(current, target)

    assert decision is expected
    assert not decision.applies

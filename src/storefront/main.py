#!/usr/bin/env python3

from __future__ import annotations

import sys
from signal import SIGINT, signal
from typing import TYPE_CHECKING

from storefront.ui.cli import main

if TYPE_CHECKING:
    from types import FrameType


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    sys.exit(0)


def run() -> None:
    signal(SIGINT, sigint_handler)
    main()


if __name__ == "__main__":
    run()

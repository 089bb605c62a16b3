"""Shared constants for the trade journal."""

from __future__ import annotations

# Capital
DEFAULT_STARTING_CAPITAL = 10_000.0

# Transactions
DEFAULT_COMMISSION = 1.0

# Grouping label for trades without a trade type / time of entry
UNSPECIFIED = "Unspecified"

# Best-combination detection
MIN_COMBINATION_TRADES = 2  # a (type, ncfd, time) triple needs this many closed trades
MIN_QUALIFYING_COMBINATIONS = 10  # surface nothing until this many triples qualify
TOP_COMBINATIONS = 3

# Classification bounds
MIN_RATING = 0
MAX_RATING = 5
MIN_NCFD = 0.0
MAX_NCFD = 100.0

# Quantities below this are treated as a flat position
QUANTITY_EPSILON = 1e-9

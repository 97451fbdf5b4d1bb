"""Named constants: input caps, playback timings and shared labels."""

from __future__ import annotations

# ── Playback bounds ──────────────────────────────────────────────

MIN_DELAY_MS = 800
MAX_DELAY_MS = 2000
MIN_LOG_CAPACITY = 14
MAX_LOG_CAPACITY = 18

DEFAULT_DELAY_MS = 1400
DEFAULT_LOG_CAPACITY = 18

# ── Input caps (bound trace length) ──────────────────────────────

MAX_SUBSTRING_LENGTH = 18
MAX_WINDOW_NUMBERS = 12
MAX_RAIN_BARS = 14
MAX_THREE_SUM_NUMBERS = 12
MAX_PRODUCT_NUMBERS = 10
MAX_PERMUTATION_NUMBERS = 4
MAX_SUBSET_NUMBERS = 4
MAX_COMBINATION_CANDIDATES = 6
MAX_COMBINATION_TARGET = 16
MAX_COURSES = 20
MAX_PREREQUISITES = 20
MAX_TREE_NODES = 15
MAX_SORT_LENGTH = 10
MAX_SPIRAL_ROWS = 6
MAX_SPIRAL_COLS = 6
MAX_ROTATE_SIZE = 6

# Largest magnitude accepted for any single number; keeps products and sums printable
MAX_ABS_VALUE = 1_000_000_000

# ── Tree parsing ─────────────────────────────────────────────────

NULL_TOKENS: frozenset[str] = frozenset({"null", "none", "#"})
ROOT_NODE_ID = "0"
LEFT_SUFFIX = "-L"
RIGHT_SUFFIX = "-R"

# ── Graph node states ────────────────────────────────────────────

NODE_IDLE = "idle"
NODE_READY = "ready"
NODE_PROCESSING = "processing"
NODE_COMPLETED = "completed"

# ── Snapshot keys shared by every builder ────────────────────────

ANSWER_KEY = "answer"

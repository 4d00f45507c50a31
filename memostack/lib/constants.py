"""Shared constants for memostack."""

import re

# Status tags as persisted in the memos table
STATUS_HOT = "hot"
STATUS_COLD = "cold"
STATUS_DONE = "done"
STATUS_DELAYED = "delayed"

# Configuration defaults
DEFAULT_MAX_HOT_COUNT = 7
DEFAULT_SPOTLIGHT_INTERVAL_SECONDS = 60
DEFAULT_DELAYED_CHECK_INTERVAL_SECONDS = 1
DEFAULT_PAUSE_SPOTLIGHT_WHEN_EXPANDED = True

# Data directory layout
DATA_DIR_NAME = "memo-stack"
DATABASE_FILE = "memos.db"
CONFIG_FILE = "config.yaml"
DATA_DIR_ENV = "MEMOSTACK_DATA_DIR"

# Delay input
DELAY_INPUT_PATTERN = re.compile(r'^(\d+):(\d+)$')
EMPTY_DELAY_INPUT = "00:00"
DELAY_PRESETS_MINUTES = (15, 60, 240)

# Placeholder for a stored memo whose title is missing
UNTITLED = "Untitled"

"""memostack - a single-user memo triage tool.

Memos flow through a small lifecycle (hot -> cold -> done, plus a
time-delayed entry point) and are persisted across restarts.
"""

__version__ = "0.3.0"

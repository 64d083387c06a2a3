"""Repository layer: DB access helpers (SQLite).

Keep functions thin and focused, so routes avoid SQL strings.
"""
from __future__ import annotations

"""Composition root — wires concrete implementations to domain interfaces.

This is the only place in the codebase that knows about *all* layers.
Every other module depends only on abstractions.

Configuration: ``ORDERBOM_DATA_DIR`` points at the directory holding the
JSON data files; it defaults to ``data/`` under the project root.
"""

from __future__ import annotations

import os
from pathlib import Path

from orderbom.infrastructure.persistence.json_order_repository import (
    JsonOrderRepository,
)
from orderbom.infrastructure.persistence.json_reservation_repository import (
    JsonReservationRepository,
)
from orderbom.infrastructure.persistence.json_tree_version_repository import (
    JsonTreeVersionRepository,
)

DATA_DIR_ENV = "ORDERBOM_DATA_DIR"

# When installed in editable mode the project root is the repo root.
_DEFAULT_DATA_DIR = Path(__file__).resolve().parents[3] / "data"


def data_dir() -> Path:
    configured = os.environ.get(DATA_DIR_ENV)
    return Path(configured) if configured else _DEFAULT_DATA_DIR


def order_repository() -> JsonOrderRepository:
    return JsonOrderRepository(data_dir() / "orders.json")


def reservation_repository() -> JsonReservationRepository:
    return JsonReservationRepository(data_dir() / "reservations.json")


def tree_version_repository() -> JsonTreeVersionRepository:
    return JsonTreeVersionRepository(data_dir() / "tree_versions.json")

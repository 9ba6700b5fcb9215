# src/subchain/core/state.py

from __future__ import annotations

import threading
from dataclasses import dataclass, field

from .ports import RoleRepo


@dataclass
class AppState:
    # Store Settings on the state for easy access in other modules later.
    settings: object

    role_store: RoleRepo

    # Held for a whole command: load, mutate + propagate, save.
    lock: threading.Lock = field(default_factory=threading.Lock)

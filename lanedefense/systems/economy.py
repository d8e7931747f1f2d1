"""Economy port and the reference gold bank.

The simulation never stores currency. It talks to whatever implements
``EconomyPort``: kills pay out through ``add_gold``, placements and
upgrades check ``affordable`` and then ``spend``.
"""

from __future__ import annotations

import logging
import threading
from abc import ABC, abstractmethod

logger = logging.getLogger(__name__)


class EconomyPort(ABC):
    """Currency collaborator contract."""

    @abstractmethod
    def add_gold(self, amount: int) -> None:
        """Credit *amount* (kill rewards, refunds)."""

    @abstractmethod
    def affordable(self, cost: int) -> bool:
        """True if *cost* could be spent right now."""

    @abstractmethod
    def spend(self, cost: int) -> bool:
        """Debit *cost*; False (and no change) if the balance is short."""

    def balance(self) -> int | None:
        """Current balance for snapshots, or None if the port does not expose one."""
        return None


class GoldBank(EconomyPort):
    """In-memory balance, safe to read from API threads."""

    __slots__ = ("_gold", "_lock", "_earned", "_spent")

    def __init__(self, initial_gold: int = 1000) -> None:
        self._gold = initial_gold
        self._earned = 0
        self._spent = 0
        self._lock = threading.Lock()

    @property
    def gold(self) -> int:
        with self._lock:
            return self._gold

    @property
    def earned(self) -> int:
        return self._earned

    @property
    def spent(self) -> int:
        return self._spent

    def balance(self) -> int | None:
        return self.gold

    def add_gold(self, amount: int) -> None:
        if amount <= 0:
            return
        with self._lock:
            self._gold += amount
            self._earned += amount

    def affordable(self, cost: int) -> bool:
        with self._lock:
            return self._gold >= cost

    def spend(self, cost: int) -> bool:
        with self._lock:
            if self._gold < cost:
                logger.debug("Cannot spend %d (balance %d)", cost, self._gold)
                return False
            self._gold -= cost
            self._spent += cost
            return True

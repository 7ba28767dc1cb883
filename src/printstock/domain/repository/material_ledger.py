"""Abstract ledger for Material on-hand quantities.

Defined in the domain layer so the domain never depends on
infrastructure. Every mutation must be atomic with respect to other
mutations of the same material, and must join the backend's transaction
when called inside one.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from decimal import Decimal

from printstock.domain.model.material import Material
from printstock.domain.model.value_objects import Quantity


class MaterialLedger(ABC):

    @abstractmethod
    def get_by_id(self, material_id: int) -> Material | None:
        """Return a material by its ID, or None if not found."""

    @abstractmethod
    def get_on_hand(self, material_id: int) -> Decimal:
        """Return the on-hand quantity; raise EntityNotFoundError if unknown."""

    @abstractmethod
    def list_all(self) -> list[Material]:
        """Return every material record."""

    @abstractmethod
    def add(self, material: Material) -> Material:
        """Persist a new material, assigning its ID."""

    @abstractmethod
    def decrement(self, material_id: int, amount: Quantity) -> Decimal:
        """Remove stock and return the new on-hand quantity.

        Raises EntityNotFoundError for an unknown material and
        InsufficientOnHandError if *amount* exceeds the on-hand quantity.
        """

    @abstractmethod
    def increment(self, material_id: int, amount: Quantity) -> Decimal:
        """Add stock and return the new on-hand quantity."""

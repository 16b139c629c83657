"""Recompute a dial's aggregate value from its memberships."""
from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal

from sqlalchemy.exc import SQLAlchemyError

from wtf_dial.core.errors import storage_error
from wtf_dial.db.transaction import Tx
from wtf_dial.repositories import DialMembershipRepository, DialRepository


@dataclass(frozen=True)
class Recomputation:
    """Stored and freshly computed value of a dial."""

    dial_id: int
    old_value: int
    new_value: int

    @property
    def changed(self) -> bool:
        return self.new_value != self.old_value


def aggregate(values: Iterable[int]) -> int:
    """Return the mean of ``values`` rounded half away from zero.

    Ties round away from zero (1.5 -> 2, 2.5 -> 3, -1.5 -> -2), the same as
    SQL ``ROUND``; Python's ``round`` would give 2.5 -> 2. An empty set
    aggregates to 0.
    """
    values = list(values)
    if not values:
        return 0
    mean = Decimal(sum(values)) / Decimal(len(values))
    return int(mean.quantize(Decimal(1), rounding=ROUND_HALF_UP))


def recompute(tx: Tx, dial_id: int) -> Recomputation | None:
    """Compute the dial's value from its current memberships without storing it.

    Returns ``None`` if the dial no longer exists. The dial row stays locked
    for the rest of the transaction so that concurrent recomputes of the same
    dial run one after the other.
    """
    try:
        old_value = DialRepository(tx.session).get_value_for_update(dial_id)
    except SQLAlchemyError as exc:
        raise storage_error("load dial value", dial_id, exc) from exc
    if old_value is None:
        return None

    try:
        values = DialMembershipRepository(tx.session).list_values(dial_id)
    except SQLAlchemyError as exc:
        raise storage_error("compute dial value", dial_id, exc) from exc

    return Recomputation(dial_id=dial_id, old_value=old_value, new_value=aggregate(values))

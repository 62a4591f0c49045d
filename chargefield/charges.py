"""The charges module contains the `ChargeSet`, the authoritative collection of point charges from which
the field, the potential and the equipotential lines are computed.

Every charge carries a unit magnitude of +1 or -1 (one nano Coulomb) and a position in the plane. Charges can be
deactivated, in which case they remain in the set but do not contribute to the field. Any mutation of the set
(adding, removing, moving or (de)activating a charge) notifies the listeners registered with
`ChargeSet.add_listener` exactly once. Owners of equipotential lines should discard their lines when notified,
see `chargefield.model.ElectrostaticModel`.
"""
from __future__ import annotations

from itertools import count

import numpy as np

from . import logging
from .typing import *


def _as_position(position: PointLike2D) -> Point2D:
    p = np.array(position, dtype=np.float64)
    assert p.shape == (2,), "Please provide a two dimensional position"
    return p


class Charge:
    """A point charge of magnitude +1 or -1.

    Parameters
    ----------
    magnitude: int
        Either +1 or -1. Any other value raises a `ValueError`.
    position: (2,) array of float
        Position in the plane (m).
    active: bool
        Whether the charge contributes to the field.
    """

    def __init__(self, magnitude: int, position: PointLike2D, active: bool = True) -> None:
        if isinstance(magnitude, (bool, np.bool_)) or magnitude not in (1, -1):
            raise ValueError(f'Charge magnitude should be +1 or -1, got {magnitude!r}')

        self._magnitude = int(magnitude)
        self._position = _as_position(position)
        self._active = bool(active)
        self.id: int | None = None

    @property
    def magnitude(self) -> int:
        return self._magnitude

    @property
    def position(self) -> Point2D:
        return self._position.copy()

    @property
    def active(self) -> bool:
        return self._active

    def is_positive(self) -> bool:
        return self._magnitude > 0

    def __repr__(self) -> str:
        sign = '+' if self.is_positive() else '-'
        state = 'active' if self._active else 'inactive'
        return f'<Charge {self.id} {sign}1 at ({self._position[0]:.3f}, {self._position[1]:.3f}), {state}>'


class ChargeSet:
    """Ordered collection of point charges. Only the active charges are used by
    `chargefield.field.FieldEvaluator`."""

    def __init__(self, charges: Iterable[Charge] = ()) -> None:
        self._charges: dict[int, Charge] = {}
        self._ids = count()
        self._listeners: list[Callable[[ChargeSet], None]] = []
        self._snapshot: Tuple[Points2D, ArrayFloat1D] | None = None
        self._terms: Tuple[Tuple[float, float, float], ...] | None = None
        self._is_charged: bool | None = None
        self.version = 0

        for c in charges:
            self._insert(c)

    def _insert(self, charge: Charge) -> None:
        assert charge.id is None, "Charge is already part of a ChargeSet"
        charge.id = next(self._ids)
        self._charges[charge.id] = charge

    def _changed(self, reason: str) -> None:
        self.version += 1
        self._snapshot = None
        self._terms = None
        self._is_charged = None
        logging.log_debug(f'Charge configuration changed ({reason}), version {self.version}')

        for listener in list(self._listeners):
            listener(self)

    def add_listener(self, listener: Callable[[ChargeSet], None]) -> None:
        """Register a function which is called with this set after every mutation."""
        self._listeners.append(listener)

    def remove_listener(self, listener: Callable[[ChargeSet], None]) -> None:
        self._listeners.remove(listener)

    def get(self, charge_or_id: Charge | int) -> Charge:
        id_ = charge_or_id.id if isinstance(charge_or_id, Charge) else charge_or_id

        if id_ is None or id_ not in self._charges:
            raise KeyError(f'Charge {charge_or_id!r} is not part of this ChargeSet')

        return self._charges[id_]

    def add_charge(self, magnitude: int, position: PointLike2D, active: bool = True) -> Charge:
        charge = Charge(magnitude, position, active)
        self._insert(charge)
        self._changed(f'added charge {charge.id}')
        return charge

    def add_positive_charge(self, position: PointLike2D) -> Charge:
        return self.add_charge(1, position)

    def add_negative_charge(self, position: PointLike2D) -> Charge:
        return self.add_charge(-1, position)

    def remove_charge(self, charge_or_id: Charge | int) -> Charge:
        charge = self.get(charge_or_id)
        del self._charges[charge.id]
        self._changed(f'removed charge {charge.id}')
        charge.id = None
        return charge

    def move_charge(self, charge_or_id: Charge | int, position: PointLike2D) -> None:
        charge = self.get(charge_or_id)
        charge._position = _as_position(position)
        self._changed(f'moved charge {charge.id}')

    def set_active(self, charge_or_id: Charge | int, active: bool) -> None:
        charge = self.get(charge_or_id)

        if charge._active == bool(active):
            return

        charge._active = bool(active)
        self._changed(f'{"activated" if active else "deactivated"} charge {charge.id}')

    def clear(self) -> None:
        if not self._charges:
            return

        for c in self._charges.values():
            c.id = None

        self._charges.clear()
        self._changed('cleared')

    @property
    def charges(self) -> List[Charge]:
        return list(self._charges.values())

    @property
    def active_charges(self) -> List[Charge]:
        return [c for c in self._charges.values() if c.active]

    def __len__(self) -> int:
        return len(self._charges)

    def __iter__(self) -> Iterator[Charge]:
        return iter(list(self._charges.values()))

    def __contains__(self, charge: Charge) -> bool:
        return isinstance(charge, Charge) and charge.id is not None and self._charges.get(charge.id) is charge

    def snapshot(self) -> Tuple[Points2D, ArrayFloat1D]:
        """Positions and magnitudes of the active charges.

        Returns
        -------
        `(positions, magnitudes)` with shapes (N, 2) and (N,). The arrays are cached until the next
        mutation and must not be modified.
        """
        if self._snapshot is None:
            active = self.active_charges
            positions = np.array([c._position for c in active], dtype=np.float64).reshape(len(active), 2)
            magnitudes = np.array([c.magnitude for c in active], dtype=np.float64)
            positions.flags.writeable = False
            magnitudes.flags.writeable = False
            self._snapshot = (positions, magnitudes)

        return self._snapshot

    def terms(self) -> Tuple[Tuple[float, float, float], ...]:
        """The active charges as `(x, y, magnitude)` tuples of Python floats, cached like `ChargeSet.snapshot`.
        Used by the scalar field evaluation, which would otherwise convert the snapshot arrays on every call."""
        if self._terms is None:
            self._terms = tuple((float(c._position[0]), float(c._position[1]), float(c.magnitude)) for c in self.active_charges)

        return self._terms

    def net_charge(self) -> int:
        return sum(c.magnitude for c in self._charges.values() if c.active)

    def is_charged(self) -> bool:
        """Whether the active charges produce a field anywhere. The set is uncharged when there are no
        active charges, or when every positive charge sits exactly on top of its own negative charge. In both
        cases the field vanishes everywhere."""
        if self._is_charged is None:
            self._is_charged = self._compute_is_charged()
        return self._is_charged

    def _compute_is_charged(self) -> bool:
        positions, magnitudes = self.snapshot()

        if len(magnitudes) == 0:
            return False

        # By Gauss's law a non-zero net charge always gives a field
        if np.sum(magnitudes) != 0:
            return True

        positive = positions[magnitudes > 0]
        unmatched = list(positions[magnitudes < 0])

        for p in positive:
            match = next((i for i, n in enumerate(unmatched) if p[0] == n[0] and p[1] == n[1]), None)

            if match is None:
                return True

            unmatched.pop(match)

        return False

    def __str__(self) -> str:
        return f'<chargefield ChargeSet, {len(self.active_charges)} active of {len(self)} charges, net charge {self.net_charge():+d}>'

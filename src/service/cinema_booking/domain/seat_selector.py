"""
Seat selection state for one user choosing seats for one showtime.

The selector is advisory: it only keeps the user from picking seats the last
ledger snapshot showed as taken. Payment finalization re-checks ownership.
"""

from typing import Iterable, List

import attrs

from src.platform.exception.exceptions import DomainError
from src.service.cinema_booking.domain.value_object.seat_map import SeatMap, sort_seat_ids


@attrs.define
class SeatSelector:
    capacity: int
    seat_map: SeatMap = attrs.field(factory=SeatMap.default)
    # Insertion order drives FIFO eviction
    _selected: List[str] = attrs.field(factory=list, init=False)
    _taken: frozenset[str] = attrs.field(factory=frozenset, init=False)

    def __attrs_post_init__(self) -> None:
        if self.capacity < 1:
            raise DomainError('Seat selection capacity must be at least 1')
        if self.capacity > self.seat_map.capacity:
            raise DomainError('Seat selection capacity exceeds the seat map')

    @property
    def taken(self) -> frozenset[str]:
        return self._taken

    @property
    def is_complete(self) -> bool:
        return len(self._selected) == self.capacity

    @property
    def remaining(self) -> int:
        return self.capacity - len(self._selected)

    def toggle(self, seat_id: str) -> List[str]:
        """
        Select or deselect a seat.

        - taken or off-map seat: no-op
        - already selected: deselect
        - room left: append
        - full: evict the oldest pick, then append

        Returns:
            The selection after the toggle, in display order
        """
        if seat_id in self._taken or not self.seat_map.contains(seat_id):
            return self.current_selection()

        if seat_id in self._selected:
            self._selected.remove(seat_id)
        elif len(self._selected) < self.capacity:
            self._selected.append(seat_id)
        else:
            self._selected = [*self._selected[1:], seat_id]
        return self.current_selection()

    def current_selection(self) -> List[str]:
        return sort_seat_ids(self._selected)

    def update_taken(self, taken: Iterable[str]) -> List[str]:
        """
        Replace the taken snapshot and drop selected seats that are now taken.

        Returns:
            Seats that were removed from the selection
        """
        self._taken = frozenset(taken)
        dropped = [seat_id for seat_id in self._selected if seat_id in self._taken]
        if dropped:
            self._selected = [seat_id for seat_id in self._selected if seat_id not in self._taken]
        return sort_seat_ids(dropped)

    def clear(self) -> None:
        self._selected = []

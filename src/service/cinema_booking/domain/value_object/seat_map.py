import re
from typing import Iterable, Iterator

import attrs

from src.platform.config.core_setting import settings
from src.platform.exception.exceptions import DomainError


_SEAT_ID_PATTERN = re.compile(r'^([A-Z]+)([1-9][0-9]*)$')


@attrs.frozen
class SeatId:
    """Row letter(s) plus 1-based seat number, rendered as e.g. "C7"."""

    row: str
    number: int

    @classmethod
    def parse(cls, raw: str) -> 'SeatId':
        match = _SEAT_ID_PATTERN.match(raw.strip().upper()) if isinstance(raw, str) else None
        if not match:
            raise DomainError(f'Invalid seat id: {raw!r}')
        return cls(row=match.group(1), number=int(match.group(2)))

    def __str__(self) -> str:
        return f'{self.row}{self.number}'


def seat_sort_key(seat_id: str) -> tuple[str, int, str]:
    # Numeric seat order within a row: A2 before A10
    match = _SEAT_ID_PATTERN.match(seat_id)
    if not match:
        return (seat_id, 0, seat_id)
    return (match.group(1), int(match.group(2)), '')


def sort_seat_ids(seat_ids: Iterable[str]) -> list[str]:
    return sorted(seat_ids, key=seat_sort_key)


@attrs.frozen
class SeatMap:
    """The fixed seat grid shared by every showtime."""

    rows: str = attrs.field(default=settings.SEAT_MAP_ROWS)
    seats_per_row: int = attrs.field(default=settings.SEAT_MAP_SEATS_PER_ROW)

    @classmethod
    def default(cls) -> 'SeatMap':
        return cls(rows=settings.SEAT_MAP_ROWS, seats_per_row=settings.SEAT_MAP_SEATS_PER_ROW)

    def contains(self, seat_id: str) -> bool:
        match = _SEAT_ID_PATTERN.match(seat_id) if isinstance(seat_id, str) else None
        if not match:
            return False
        row, number = match.group(1), int(match.group(2))
        return len(row) == 1 and row in self.rows and 1 <= number <= self.seats_per_row

    def __iter__(self) -> Iterator[str]:
        for row in self.rows:
            for number in range(1, self.seats_per_row + 1):
                yield f'{row}{number}'

    @property
    def capacity(self) -> int:
        return len(self.rows) * self.seats_per_row

"""Block calendar and weekend key definitions."""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, timedelta

SATURDAY = 5  # date.weekday()

_WEEKEND_KEY_RE = re.compile(r"^B(\d+)-W([12])$")


@dataclass(frozen=True)
class Block:
    """A 2-week scheduling block."""
    number: int          # 1-26
    start_date: date
    end_date: date

    @property
    def weekend_saturdays(self) -> tuple[date, date]:
        """Saturday of W1 (first Saturday on/after start) and W2 (+7 days)."""
        offset = (SATURDAY - self.start_date.weekday()) % 7
        sat1 = self.start_date + timedelta(days=offset)
        return sat1, sat1 + timedelta(days=7)

    def saturday_for(self, weekend: int) -> date:
        return self.weekend_saturdays[weekend - 1]

    @property
    def days(self) -> list[date]:
        """Every calendar day in the block, inclusive."""
        result = []
        current = self.start_date
        while current <= self.end_date:
            result.append(current)
            current += timedelta(days=1)
        return result

    def contains(self, day: date) -> bool:
        return self.start_date <= day <= self.end_date


def compute_blocks(academic_year_start: date, n_blocks: int = 26) -> list[Block]:
    """Compute consecutive 2-week blocks for the academic year.

    Block 1 runs from ``academic_year_start`` to the Sunday closing its
    second week, so later blocks always start on a Monday (July 1, 2026 is a
    Wednesday, giving a short 12-day Block 1 ending Sunday July 12).
    """
    first_monday = academic_year_start + timedelta(days=(7 - academic_year_start.weekday()) % 7)
    if first_monday == academic_year_start:
        block1_end = academic_year_start + timedelta(days=13)
    else:
        block1_end = first_monday + timedelta(days=6)

    blocks = [Block(number=1, start_date=academic_year_start, end_date=block1_end)]
    current = block1_end + timedelta(days=1)
    for i in range(2, n_blocks + 1):
        block_end = current + timedelta(days=13)  # 2 weeks = 14 days - 1
        blocks.append(Block(number=i, start_date=current, end_date=block_end))
        current = block_end + timedelta(days=1)
    return blocks


def find_block_for_date(day: date, blocks: list[Block]) -> int | None:
    """Block number containing ``day``, or None if outside the calendar."""
    for block in blocks:
        if block.contains(day):
            return block.number
    return None


def weekend_key(block_number: int, weekend: int) -> str:
    """Weekend key for a 1-based block number, e.g. ``B14-W1``."""
    return f"B{block_number}-W{weekend}"


def key_for_index(block_idx: int, weekend: int) -> str:
    """Weekend key for a 0-based block index."""
    return weekend_key(block_idx + 1, weekend)


def parse_weekend_key(key: str) -> tuple[int, int]:
    """Parse ``B<block>-W<weekend>`` into (block_number, weekend)."""
    match = _WEEKEND_KEY_RE.match(key.strip())
    if not match:
        raise ValueError(f"Malformed weekend key: {key!r}")
    return int(match.group(1)), int(match.group(2))


def all_weekend_keys(n_blocks: int = 26) -> list[str]:
    return [key_for_index(b, w) for b in range(n_blocks) for w in (1, 2)]

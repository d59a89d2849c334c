from datetime import date

import pytest

from fellowship_scheduler.models.calendar import Block, compute_blocks
from fellowship_scheduler.models.constraints import SchedulerConfig
from fellowship_scheduler.models.fellow import Fellow, fellow_names, pgy_levels

from factories import build_roster, build_schedule


@pytest.fixture()
def blocks() -> list[Block]:
    return compute_blocks(date(2026, 7, 1))


@pytest.fixture()
def roster() -> list[Fellow]:
    return build_roster()


@pytest.fixture()
def fellows(roster: list[Fellow]) -> list[str]:
    return fellow_names(roster)


@pytest.fixture()
def levels(roster: list[Fellow]) -> dict[str, int]:
    return pgy_levels(roster)


@pytest.fixture()
def schedule() -> dict[str, list[str]]:
    return build_schedule()


@pytest.fixture()
def config() -> SchedulerConfig:
    # Fewer attempts keep the suite quick; assignment rules are unchanged
    return SchedulerConfig(attempts=10)

from pathlib import Path

import pytest

from shadowmarkets.config import Settings
from shadowmarkets.services.chain import PaperChainClient

from tests.helpers import Clock


@pytest.fixture
def clock() -> Clock:
    return Clock()


@pytest.fixture
def paper_chain(clock: Clock) -> PaperChainClient:
    return PaperChainClient(balance_base_units=100_000_000, clock=clock)


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return Settings(data_dir=tmp_path)

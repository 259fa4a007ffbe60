import pathlib
import sys

import pytest

# Make the repo root importable without an editable install
ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from creditvote_node.runtime.proposals import ProposalStore
from creditvote_node.runtime.service import VotingService
from creditvote_node.runtime.voters import VoterLedger

T0 = 1_700_000_000


@pytest.fixture
def t0():
    return T0


@pytest.fixture
def ledger():
    return VoterLedger()


@pytest.fixture
def store():
    return ProposalStore()


@pytest.fixture
def service():
    """Fresh service per test, nothing shared between tests."""
    return VotingService()

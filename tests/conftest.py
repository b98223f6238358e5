"""Shared fixtures for gibberkit tests."""

import sys
from pathlib import Path

import pytest

# Ensure repo root is on path
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))


CORPUS = """
The morning light crept slowly across the quiet harbour, touching the
painted hulls of fishing boats and the weathered stones of the old
breakwater. Gulls wheeled above the market square where traders were
already setting out baskets of silver herring, bright oranges, crusty
bread and wheels of pungent cheese. Somewhere a church bell started
ringing, answered moments later by another further along the coast.
Children chased each other between the stalls while their grandmothers
bargained loudly over onions, carrots, lettuce and turnips. A tired
postman pushed his bicycle uphill, pausing beside the fountain to wipe
his forehead and watch the ferry leaving for the northern islands.
Later, when the afternoon clouds gathered over the mountains, the
traders folded their awnings, counted their coins and wandered home
through narrow streets smelling of woodsmoke, roasting chestnuts and
salty wind blowing steadily from the restless western ocean.
"""


@pytest.fixture
def corpus_text() -> str:
    return CORPUS


@pytest.fixture
def corpus_file(tmp_path) -> Path:
    path = tmp_path / "corpus.txt"
    path.write_text(CORPUS)
    return path

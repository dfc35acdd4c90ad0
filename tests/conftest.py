"""
pytest configuration and fixtures for DBS decoder tests.

Provides reusable fixtures for:
- Sentence factories
- The shipped test vector file
- Hypothesis property-based testing configuration
"""

import os
import sys
from pathlib import Path

import pytest

# Add project paths
sys.path.insert(0, str(Path(__file__).parent.parent / "tools"))

from nmea_sentence import NmeaSentence, SentenceType

# Configure Hypothesis profiles
from hypothesis import settings, Verbosity, Phase

# Default profile: balanced speed and coverage
settings.register_profile(
    "default",
    max_examples=100,
    deadline=None,
)

# CI profile: more thorough testing
settings.register_profile(
    "ci",
    max_examples=500,
    deadline=None,
    suppress_health_check=[],
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.shrink],
)

# Dev profile: fast iteration
settings.register_profile(
    "dev",
    max_examples=10,
    deadline=None,
)

# Debug profile: verbose output
settings.register_profile(
    "debug",
    max_examples=10,
    verbosity=Verbosity.verbose,
    deadline=None,
)

# Load profile from environment
settings.load_profile(os.environ.get("HYPOTHESIS_PROFILE", "default"))


VECTORS_DIR = Path(__file__).parent.parent / "vectors"


@pytest.fixture
def make_sentence():
    """
    Provide a factory for sentences as the router would hand them over.

    Usage:
        def test_decode(make_sentence):
            sentence = make_sentence("7.8,f,2.4,M,1.3,F")
            other = make_sentence("...", message_id=SentenceType.DBT)
    """
    def _make(data: str, message_id: SentenceType = SentenceType.DBS,
              talker_id: str = "SD", checksum: int = 0) -> NmeaSentence:
        return NmeaSentence(
            talker_id=talker_id,
            message_id=message_id,
            data=data,
            checksum=checksum,
        )
    return _make


@pytest.fixture
def dbs_vectors_path() -> Path:
    """Path to the shipped DBS test vector file."""
    return VECTORS_DIR / "dbs.yaml"


# Markers for test categorization
def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )
    config.addinivalue_line(
        "markers", "cli: marks tests that run a tool's command line entry point"
    )

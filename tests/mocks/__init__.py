"""Mock objects for CIBorium testing."""

from tests.mocks.mock_launcher import ChannelCall, MockChannel, MockLauncher, MockNode, MockProc

__all__ = [
    "ChannelCall",
    "MockChannel",
    "MockLauncher",
    "MockNode",
    "MockProc",
]

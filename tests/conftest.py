"""
Root pytest configuration and fixtures for walletchat.
"""

import os
from pathlib import Path
import sys

import pytest
import responses

# Add the project root to the Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))


@pytest.fixture
def base_url():
    """Test base URL."""
    return "https://chat.test.walletchat.dev/api"


@pytest.fixture
def user_id():
    """Test user id."""
    return "did:privy:test-user"


@pytest.fixture
def history_records():
    """Stored chat history as returned by GET /chat."""
    return [
        {"sender": "user", "content": "What is my balance?"},
        {"sender": "assistant", "content": "You hold 1.2 ETH."},
    ]


@pytest.fixture
def transfer_content():
    """Structured nativeTransfer content as emitted by the agent."""
    return {
        "tool": "nativeTransfer",
        "your_summary": "Sent 0.5 ETH to 0xABCDEF1234567890.",
        "parameters": {
            "amount": "0.5",
            "to": "0xABCDEF1234567890",
            "txHash": "0xdeadbeef",
        },
    }


@pytest.fixture(autouse=True)
def clean_environment():
    """Clean environment variables before each test."""
    original_env = os.environ.copy()

    for key in list(os.environ.keys()):
        if key.startswith("WALLETCHAT_"):
            del os.environ[key]

    yield

    os.environ.clear()
    os.environ.update(original_env)


@pytest.fixture
def mock_requests():
    """Mock HTTP requests using responses library."""
    with responses.RequestsMock() as rsps:
        yield rsps


@pytest.fixture
def client(base_url, user_id):
    """WalletChat client pointed at the test server."""
    from walletchat import WalletChat

    return WalletChat(base_url=base_url, user_id=user_id)

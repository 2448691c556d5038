"""
Pytest configuration and fixtures for chatwarden tests.
"""

import os
import sys
import tempfile
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import pytest

# Keep test runs from writing session logs into the repository.
os.environ.setdefault("CHATWARDEN_LOGS_DIR", tempfile.mkdtemp(prefix="chatwarden-logs-"))

# Add src directory to path so imports work without an editable install
src_path = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(src_path))

from chatwarden.moderation.phrase_store import PhraseStore  # noqa: E402
from chatwarden.moderation.violation_ledger import ViolationLedger  # noqa: E402


@pytest.fixture
def phrase_store(tmp_path):
    return PhraseStore(tmp_path / "blacklist.json", log=MagicMock())


@pytest.fixture
def ledger(tmp_path):
    return ViolationLedger(tmp_path / "violations.json", log=MagicMock())


@pytest.fixture
def chat_actions():
    """Chat-action collaborator double whose calls succeed by default."""
    actions = MagicMock()
    actions.delete_message = AsyncMock()
    actions.ban_user_everywhere = AsyncMock(return_value=[1])
    actions.send_message = AsyncMock(return_value=MagicMock(name="warning_message"))
    actions.is_admin = AsyncMock(return_value=False)
    actions.display_name = MagicMock(return_value="@spammer")
    return actions


@pytest.fixture
def audit_sink():
    sink = MagicMock()
    sink.log_to_admin = AsyncMock()
    return sink

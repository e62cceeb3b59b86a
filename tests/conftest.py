import sys
from pathlib import Path

import pytest

# Allow `import tempfox` without installing the package.
ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))


@pytest.fixture(autouse=True)
def _block_browser_launch(monkeypatch):
    """Tests must never start a real Firefox."""

    def _blocked(*_args, **_kwargs):
        raise AssertionError("subprocess launch attempted during tests")

    import tempfox.launch as launch

    monkeypatch.setattr(launch.subprocess, "run", _blocked)

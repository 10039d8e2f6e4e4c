import os
import sys
from pathlib import Path
import pytest

# Ensure we can import modules from src/ at collection time
ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))


@pytest.fixture()
def sandbox(tmp_path, monkeypatch):
    # Work in an isolated temp directory
    monkeypatch.chdir(tmp_path)
    home = tmp_path / "home"
    home.mkdir()
    # Prune environment to a minimal safe set
    safe_env = {
        "PATH": os.environ.get("PATH", "/usr/bin:/bin"),
        "HOME": str(home),
        "LANG": os.environ.get("LANG", "C"),
        "LC_ALL": os.environ.get("LC_ALL", "C"),
        "TERM": os.environ.get("TERM", "dumb"),
    }
    # Keep history writes out of the real home directory
    monkeypatch.setenv("PYROSH_HISTFILE", str(tmp_path / "history"))
    return tmp_path, safe_env


@pytest.fixture()
def session(sandbox):
    from session import ShellSession
    _, safe_env = sandbox
    return ShellSession(env=safe_env, subst_shell="/bin/sh")


@pytest.fixture()
def session_without(sandbox):
    """Build a session whose environment lacks the given variables."""
    from session import ShellSession
    _, safe_env = sandbox

    def build(*names):
        env = {k: v for k, v in safe_env.items() if k not in names}
        return ShellSession(env=env, subst_shell="/bin/sh")
    return build

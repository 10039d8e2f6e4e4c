#!/usr/bin/env python3
"""Interactive end-to-end tests driving pyrosh through a pseudo terminal"""

import os
import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parent.parent

# Try to import pexpect
try:
    import pexpect
    HAS_PEXPECT = True
except ImportError:
    HAS_PEXPECT = False

PROMPT = r'PyroShell\$ '


@pytest.fixture()
def shell(tmp_path):
    home = tmp_path / "home"
    home.mkdir()
    env = {
        "PATH": os.environ.get("PATH", "/usr/bin:/bin"),
        "HOME": str(home),
        "TERM": "dumb",
        "PYROSH_HISTFILE": str(tmp_path / "history"),
    }
    child = pexpect.spawn(
        sys.executable,
        [str(ROOT / 'src' / 'main.py')],
        timeout=5,
        cwd=str(tmp_path),
        env=env,
        encoding="utf-8",
    )
    child.home = str(home)
    child.histfile = tmp_path / "history"
    try:
        yield child
    finally:
        if child.isalive():
            child.terminate(force=True)


@pytest.mark.skipif(not HAS_PEXPECT, reason="requires pexpect")
class TestInteractiveLoop:
    """Test the interactive loop with pexpect"""

    def test_exit_status_zero(self, shell):
        shell.expect(PROMPT)
        shell.sendline('exit')
        shell.expect(pexpect.EOF)
        shell.close()
        assert shell.exitstatus == 0

    def test_ctrl_d_exits(self, shell):
        shell.expect(PROMPT)
        shell.sendcontrol('d')
        shell.expect(pexpect.EOF)
        shell.close()
        assert shell.exitstatus == 0

    def test_runs_command_with_expansion(self, shell):
        shell.expect(PROMPT)
        shell.sendline('echo $HOME/x')
        shell.expect_exact(shell.home + '/x')
        shell.expect(PROMPT)
        shell.sendline('exit')
        shell.expect(pexpect.EOF)

    def test_failed_cd_keeps_session(self, shell):
        shell.expect(PROMPT)
        shell.sendline('cd /does/not/exist')
        shell.expect('cd:')
        shell.expect(PROMPT)
        shell.sendline('exit')
        shell.expect(pexpect.EOF)
        shell.close()
        assert shell.exitstatus == 0

    def test_history_persisted_and_recalled(self, shell):
        shell.expect(PROMPT)
        shell.sendline('echo $HOME/first')
        shell.expect_exact(shell.home + '/first')
        shell.expect(PROMPT)
        # Up arrow then Enter re-runs the previous line
        shell.send('\x1b[A')
        shell.send('\r')
        shell.expect_exact(shell.home + '/first')
        shell.expect(PROMPT)
        shell.sendline('exit')
        shell.expect(pexpect.EOF)
        lines = shell.histfile.read_text().splitlines()
        assert lines == ['echo $HOME/first', 'echo $HOME/first', 'exit']

    def test_tab_completes_directory(self, shell, tmp_path):
        (tmp_path / "pyro_target_dir").mkdir()
        shell.expect(PROMPT)
        shell.send('cd pyro_tar')
        shell.send('\t')
        shell.expect_exact('pyro_target_dir/')
        shell.send('\r')
        shell.expect(PROMPT)
        shell.sendline('pwd')
        shell.expect_exact('pyro_target_dir')
        shell.expect(PROMPT)
        shell.sendline('exit')
        shell.expect(pexpect.EOF)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])

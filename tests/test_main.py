"""Tests for the read loop in main.py, driven by a scripted editor."""

import pytest  # type: ignore

import main
from main import EXIT_COMMAND, PROMPT, create_session, repl


class ScriptedEditor:
    """Return queued lines; exceptions in the queue are raised instead."""

    def __init__(self, *items):
        self.items = list(items)
        self.prompts = []

    def read_line(self, prompt):
        self.prompts.append(prompt)
        if not self.items:
            raise EOFError
        item = self.items.pop(0)
        if isinstance(item, BaseException):
            raise item
        return item


@pytest.fixture()
def executed(monkeypatch):
    lines = []

    def fake_execute(line, session):
        lines.append(line)
        return 0

    monkeypatch.setattr(main, "execute_line", fake_execute)
    return lines


class TestRepl:
    def test_exit_ends_session_before_execution(self, session, executed):
        ed = ScriptedEditor("ls", EXIT_COMMAND, "pwd")
        assert repl(session, ed) == 0
        assert executed == ["ls"]
        assert ed.prompts == [PROMPT, PROMPT]

    def test_prompt_text(self):
        assert PROMPT == "PyroShell$ "

    def test_exit_check_uses_raw_line(self, session, executed):
        session.set_var("CMD", "exit")
        assert repl(session, ScriptedEditor("$CMD", " exit")) == 0
        assert executed == ["$CMD", " exit"]

    def test_end_of_input_is_clean_exit(self, session, executed, capsys):
        assert repl(session, ScriptedEditor()) == 0
        assert capsys.readouterr().out == "\n"

    def test_interrupt_at_prompt_continues(self, session, executed, capsys):
        assert repl(session, ScriptedEditor(KeyboardInterrupt(), "ls")) == 0
        assert executed == ["ls"]
        # one newline for the interrupt, one for end of input
        assert capsys.readouterr().out == "\n\n"

    def test_blank_lines_skipped(self, session, executed):
        repl(session, ScriptedEditor("", "   ", "ls"))
        assert executed == ["ls"]

    def test_errors_reported_and_loop_continues(self, session, monkeypatch, capsys):
        seen = []

        def flaky(line, sess):
            seen.append(line)
            if line == "bad":
                raise RuntimeError("kaboom")
            return 0

        monkeypatch.setattr(main, "execute_line", flaky)
        assert repl(session, ScriptedEditor("bad", "good")) == 0
        assert seen == ["bad", "good"]
        assert "pyrosh: error: kaboom" in capsys.readouterr().err

    def test_command_status_not_propagated(self, session):
        assert repl(session, ScriptedEditor("false")) == 0
        assert session.last_status == 1


class TestCreateSession:
    def test_history_loaded_from_configured_file(self, sandbox, monkeypatch):
        tmp_path, _ = sandbox
        hist = tmp_path / "custom_history"
        hist.write_text("ls\npwd\n")
        monkeypatch.setenv("PYROSH_HISTFILE", str(hist))
        sess = create_session()
        assert sess.history.entries == ["ls", "pwd"]
        assert sess.history.cursor == 2

    def test_environment_seeded_from_os(self, sandbox, monkeypatch):
        monkeypatch.setenv("PYROSH_SEEDED", "yes")
        assert create_session().get_var("PYROSH_SEEDED") == "yes"

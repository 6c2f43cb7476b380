import pytest

from jsrecover.errors import EvaluationError
from jsrecover.sandbox import Sandbox


@pytest.fixture
def sandbox():
    return Sandbox(timeout_ms=200)


def test_evaluate(sandbox):
    assert sandbox.evaluate("'ab' + 'cd'") == "abcd"


def test_console_is_stubbed(sandbox):
    assert sandbox.evaluate("console.log('quiet'); 1 + 1") == 2


def test_thrown_errors_become_evaluation_errors(sandbox):
    with pytest.raises(EvaluationError):
        sandbox.evaluate("throw new Error('broken')")


def test_runaway_code_times_out(sandbox):
    with pytest.raises(EvaluationError):
        sandbox.evaluate("while (true) {}")


def test_call_in_isolation_does_not_leak(sandbox):
    assert sandbox.call_in_isolation("function f(a) { return a * 2; }", "f", ["21"]) == 42
    assert sandbox.evaluate("typeof f") == "undefined"


def test_context_manager_closes(monkeypatch):
    closed = []
    monkeypatch.setattr(Sandbox, "close", lambda self: closed.append(self))
    with Sandbox() as sandbox:
        assert sandbox.evaluate("6 * 7") == 42
    assert closed == [sandbox]


def test_close_releases_the_context():
    sandbox = Sandbox()
    sandbox.close()

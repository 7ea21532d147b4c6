import pytest

from buildinfo.core.exceptions import (
    BuildInfoError,
    ExternalToolError,
    InvalidArgumentError,
    MalformedInputError,
    NotAvailableError,
)


class TestErrors:
    @pytest.mark.parametrize(
        "error_cls, builtin",
        [
            (InvalidArgumentError, ValueError),
            (MalformedInputError, ValueError),
            (NotAvailableError, LookupError),
            (ExternalToolError, RuntimeError),
        ],
    )
    def test_hierarchy(self, error_cls, builtin):
        assert issubclass(error_cls, BuildInfoError)
        assert issubclass(error_cls, builtin)

    def test_default_exit_code(self):
        assert InvalidArgumentError("bad").exit_code == 1

    def test_explicit_exit_code(self):
        assert BuildInfoError("bad", exit_code=3).exit_code == 3

    def test_external_tool_error_prefers_stderr(self):
        exc = ExternalToolError("git failed", stderr="fatal: boom\n", exit_code=128)

        assert str(exc) == "fatal: boom"
        assert exc.stderr == "fatal: boom\n"
        assert exc.exit_code == 128

    def test_external_tool_error_without_stderr(self):
        assert str(ExternalToolError("git failed")) == "git failed"

from buildkeeper.exceptions import (
    AppBaseError,
    ExternalToolError,
    OperationalError,
    ResourceConflictError,
    ResourceNotFoundError,
    ValidationError,
)


def test_message_is_formatted_from_key() -> None:
    error = ResourceNotFoundError("template.not_found", name="llvm")

    assert str(error) == "No template exists for 'llvm'"
    assert error.status_code == 404
    assert error.params == {"name": "llvm"}


def test_status_codes() -> None:
    assert ResourceConflictError("template.conflict", name="x").status_code == 409
    assert ValidationError("config.invalid_override", item="x").status_code == 400
    assert OperationalError("git.failed", url="u", error="e").status_code == 500


def test_unknown_key_or_missing_params_fall_back() -> None:
    assert str(AppBaseError("no.such.key", foo=1)) == "[no.such.key] foo=1 (retriable: False)"
    assert str(OperationalError("git.failed", retriable=True)) == "[git.failed]  (retriable: True)"


def test_external_tool_error() -> None:
    error = ExternalToolError("cmake", 1, output="CMake Error")

    assert isinstance(error, OperationalError)
    assert str(error) == "'cmake' exited with code 1"
    assert error.output == "CMake Error"
    assert error.retriable is False

from typer.testing import CliRunner

from pysym.cli.main import app

runner = CliRunner()

SOURCE = """
def greet(name):
    return name

message = greet("hi")
"""


def test_print_defaults_to_current_package(workspace_factory):
    workspace_factory.with_source("hello.py", SOURCE).build()

    result = runner.invoke(app, [])

    assert result.exit_code == 0, result.output
    assert "hello.py:1:5: . . greet func+" in result.stdout
    assert "hello.py:4:11: . . greet func" in result.stdout
    assert "hello.py:1:11: . . name localvar+" in result.stdout


def test_kind_filter_and_types(workspace_factory):
    workspace_factory.with_source("hello.py", SOURCE).build()

    result = runner.invoke(app, ["-k", "func", "-t", "."])

    assert result.exit_code == 0, result.output
    lines = [line for line in result.stdout.splitlines() if line.startswith("hello.py")]
    assert lines == [
        "hello.py:1:5: . . greet func+ def greet(name)",
        "hello.py:4:11: . . greet func def greet(name)",
    ]


def test_config_supplies_default_kinds(workspace_factory):
    workspace_factory.with_config({"kinds": "var"}).with_source(
        "hello.py", SOURCE
    ).build()

    result = runner.invoke(app, [])

    assert result.exit_code == 0, result.output
    assert "hello.py:4:1: . . message var+" in result.stdout
    assert "greet func" not in result.stdout


def test_unknown_kind_is_a_usage_error(workspace_factory):
    workspace_factory.with_source("hello.py", SOURCE).build()

    result = runner.invoke(app, ["-k", "func,nope"])

    assert result.exit_code == 2


def test_empty_kind_list_is_a_usage_error(workspace_factory):
    workspace_factory.with_source("hello.py", SOURCE).build()

    result = runner.invoke(app, ["-k", ""])

    assert result.exit_code == 2


def test_write_renames_from_stdin(workspace_factory):
    root = workspace_factory.with_source("hello.py", SOURCE).build()

    result = runner.invoke(
        app, ["-w"], input="hello.py:1:5: . . salute func+\n"
    )

    assert result.exit_code == 0, result.output
    assert "hello.py" in result.stdout
    assert (root / "hello.py").read_text() == (
        "def salute(name):\n"
        "    return name\n"
        "\n"
        'message = salute("hi")\n'
    )


def test_help_describes_the_line_format():
    result = runner.invoke(app, ["--help"])

    assert result.exit_code == 0
    assert "<file>:<line>:<col>:" in result.output

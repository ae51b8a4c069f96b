"""Tests for the click dispatcher and the CLI entry point."""

import json
import os
from unittest.mock import patch

import click
import pytest
from click.testing import CliRunner

from artisan.__main__ import _split_global_options, main
from artisan.commands import (
    ArtisanGroup,
    Command,
    CommandDescriptor,
    CommandOrigin,
    CommandRegistry,
    create_app,
)
from artisan.core.config import ArtisanConfiguration
from artisan.host import create_application, create_builder, run


class GreetCommand(Command):
    description = "Greet someone."
    examples = [["greet", "Ada"]]

    def params(self):
        return [
            click.Argument(["who"]),
            click.Option(["--shout"], is_flag=True),
        ]

    def handle(self, who, shout=False):
        message = f"hello {who}"
        self.info(message.upper() if shout else message)


class FailCommand(Command):
    def handle(self):
        self.error("it broke")
        return 3


@pytest.fixture(autouse=True)
def clean_env():
    env = {k: v for k, v in os.environ.items() if not k.startswith("ARTISAN_")}
    with patch.dict(os.environ, env, clear=True):
        yield


@pytest.fixture
def app(tmp_path):
    config = ArtisanConfiguration(aliases={"hi": "greet", "g": "greet"})
    registry = CommandRegistry(tmp_path, configuration=config)
    registry.add_command(GreetCommand).add_command(FailCommand)
    return create_application(registry)


class TestArtisanGroup:
    def test_runs_command(self, app):
        result = CliRunner().invoke(app, ["greet", "Ada"])
        assert result.exit_code == 0
        assert "hello Ada" in result.output

    def test_options(self, app):
        result = CliRunner().invoke(app, ["greet", "Ada", "--shout"])
        assert "HELLO ADA" in result.output

    def test_exit_status(self, app):
        result = CliRunner().invoke(app, ["fail"])
        assert result.exit_code == 3
        assert "it broke" in result.output

    def test_alias_resolved_at_dispatch(self, app):
        result = CliRunner().invoke(app, ["hi", "Bob"])
        assert result.exit_code == 0
        assert "hello Bob" in result.output
        assert "hi" not in app.commands

    def test_unknown_command(self, app):
        result = CliRunner().invoke(app, ["nope"])
        assert result.exit_code == 2

    def test_help_lists_in_registration_order_with_aliases(self, app):
        result = CliRunner().invoke(app, ["--help"])
        assert result.exit_code == 0
        assert "greet (hi, g)" in result.output
        assert result.output.index("greet") < result.output.index("fail")

    def test_command_help_shows_examples(self, app):
        result = CliRunner().invoke(app, ["greet", "--help"])
        assert "Greet someone." in result.output
        assert "artisan greet Ada" in result.output


class TestCreateApp:
    def test_registers_in_table_order(self, tmp_path):
        registry = CommandRegistry(tmp_path, configuration=ArtisanConfiguration())
        registry.add_command(FailCommand).add_command(GreetCommand)
        app = create_app(registry.build())
        assert isinstance(app, ArtisanGroup)
        assert list(app.commands) == ["fail", "greet"]

    def test_skips_unbuilt_entries(self):
        app = create_app([CommandDescriptor("ghost", CommandOrigin.DISCOVERED_HEURISTIC)])
        assert app.commands == {}

    def test_duplicate_names_rejected(self):
        cmd = click.Command("x")
        table = [
            CommandDescriptor("x", CommandOrigin.EXPLICIT, click_command=cmd),
            CommandDescriptor("x", CommandOrigin.DISCOVERED_COMPILED, click_command=cmd),
        ]
        with pytest.raises(ValueError, match="duplicate"):
            create_app(table)


class TestBuiltins:
    def test_builder_registers_builtins_first(self, tmp_path):
        registry = create_builder(tmp_path, commands=[(GreetCommand, "greet")])
        names = [d.name for d in registry.build()]
        assert names == ["list", "about", "config:publish", "greet"]

    def test_list(self, tmp_path):
        cmds = tmp_path / "console" / "commands"
        cmds.mkdir(parents=True)
        (cmds / "foo.py").write_text(
            "from artisan.commands import Command\n\n"
            "class FooCommand(Command):\n"
            "    description = 'Foo it.'\n\n"
            "    def handle(self):\n"
            "        return 0\n"
        )
        app = create_application(create_builder(tmp_path))
        result = CliRunner().invoke(app, ["list"])
        assert result.exit_code == 0
        assert "foo" in result.output
        assert "Foo it." in result.output
        assert "discovered" in result.output

    def test_list_unresolved(self, tmp_path):
        cmds = tmp_path / "console" / "commands"
        cmds.mkdir(parents=True)
        (cmds / "deploy.py").write_text(
            "import not_installed_anywhere_xyz\n\nclass DeployCommand(Command):\n    pass\n"
        )
        app = create_application(create_builder(tmp_path))
        result = CliRunner().invoke(app, ["list", "--unresolved"])
        assert "unresolved" in result.output
        assert "deploy" in result.output

    def test_about(self, tmp_path):
        (tmp_path / "pyproject.toml").write_text(
            '[project]\nname = "acme"\n\n[project.scripts]\nacme = "acme:main"\n'
        )
        app = create_application(create_builder(tmp_path))
        result = CliRunner().invoke(app, ["about"])
        assert result.exit_code == 0
        assert "acme" in result.output
        assert "console" in result.output
        assert "pyproject.toml" in result.output

    def test_config_publish(self, tmp_path):
        app = create_application(create_builder(tmp_path))
        runner = CliRunner()
        result = runner.invoke(app, ["config:publish"])
        assert result.exit_code == 0
        data = json.loads((tmp_path / "artisan.json").read_text())
        assert data["commandsPath"] == "console/commands"

        again = runner.invoke(app, ["config:publish"])
        assert again.exit_code == 1
        assert "already exists" in again.output

        forced = runner.invoke(app, ["config:publish", "--force"])
        assert forced.exit_code == 0


class TestRun:
    def test_returns_exit_status(self, tmp_path):
        assert run(["about"], project_path=tmp_path) == 0

    def test_extra_commands(self, tmp_path):
        assert run(["fail"], project_path=tmp_path, commands=[FailCommand]) == 3

    def test_unknown_command(self, tmp_path):
        assert run(["nope"], project_path=tmp_path) == 2

    def test_prints_discovery_warnings(self, tmp_path, capsys):
        cmds = tmp_path / "console" / "commands"
        cmds.mkdir(parents=True)
        (cmds / "broken.py").write_text("def x(:\n")
        assert run(["about"], project_path=tmp_path) == 0
        err = capsys.readouterr().err
        assert "broken.py" in err
        assert "warning" in err

    def test_log_level_none_silences(self, tmp_path, capsys):
        cmds = tmp_path / "console" / "commands"
        cmds.mkdir(parents=True)
        (cmds / "broken.py").write_text("def x(:\n")
        (tmp_path / "artisan.json").write_text(json.dumps({"logging": {"level": "None"}}))
        run(["about"], project_path=tmp_path)
        assert "broken.py" not in capsys.readouterr().err

    def test_alias_from_config_file(self, tmp_path):
        (tmp_path / "artisan.json").write_text('{"aliases": {"ls": "list",},}')
        assert run(["ls"], project_path=tmp_path) == 0


class TestMain:
    def test_split_global_options(self, tmp_path):
        project, verbose, rest = _split_global_options(
            ["-v", "--project", str(tmp_path), "greet", "-v"]
        )
        assert project == tmp_path
        assert verbose is True
        assert rest == ["greet", "-v"]

    def test_split_equals_form(self, tmp_path):
        project, _, rest = _split_global_options([f"--project={tmp_path}", "list"])
        assert project == tmp_path
        assert rest == ["list"]

    def test_missing_project_value(self):
        assert main(["--project"]) == 2

    def test_project_not_a_directory(self, tmp_path):
        assert main(["-C", str(tmp_path / "nope"), "list"]) == 2

    def test_runs_against_project(self, tmp_path):
        assert main(["-C", str(tmp_path), "list"]) == 0

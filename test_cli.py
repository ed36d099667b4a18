import os
import unittest
from pathlib import Path

from click.testing import CliRunner

from ferod import Command, CommandBuilder, EventListener, __version__
from ferod.cli.create_file import CommandAnswers, command_setters
from ferod.cli.files import identifier, merge_requirements, requirement_name, slugify
from ferod.cli.main import cli
from ferod.loader import FileModuleSource, collect


class TestFiles(unittest.TestCase):
    def test_requirement_name(self):
        self.assertEqual(requirement_name("discord.py>=2.3"), "discord-py")
        self.assertEqual(requirement_name("python_dotenv  # env files"), "python-dotenv")
        self.assertIsNone(requirement_name("# just a comment"))
        self.assertIsNone(requirement_name("-r other.txt"))

    def test_merge_requirements(self):
        merged = merge_requirements(
            ["ferod", "discord.py>=2.3", "python-dotenv"],
            ["ruff>=0.4", "discord.py==2.4.0"],
        )
        self.assertEqual(merged, "ferod\ndiscord.py==2.4.0\npython-dotenv\nruff>=0.4\n")

    def test_slugify(self):
        self.assertEqual(slugify("Ban Member"), "ban_member")
        self.assertEqual(slugify("user-info.py"), "user_info")
        self.assertEqual(slugify("8ball"), "8ball")
        with self.assertRaises(ValueError):
            slugify("!!!")

    def test_identifier(self):
        self.assertEqual(identifier("ban_member"), "ban_member")
        self.assertEqual(identifier("8ball"), "_8ball")
        self.assertEqual(identifier("import"), "import_")

    def test_command_setters_escape_answers(self):
        answers = CommandAnswers(name="say", description='Say "hi" \\ then leave', category="It's fun")
        source = "(\n    CommandBuilder()\n" + command_setters(answers) + ")\n"

        compile(source, "<setters>", "eval")
        self.assertIn(repr('Say "hi" \\ then leave'), source)


class CliTestCase(unittest.TestCase):
    def setUp(self):
        self.runner = CliRunner()

    def invoke(self, *args, **kwargs):
        return self.runner.invoke(cli, list(args), catch_exceptions=False, **kwargs)


class TestCreateApp(CliTestCase):
    def test_version(self):
        result = self.invoke("--version")
        self.assertEqual(result.exit_code, 0)
        self.assertIn(__version__, result.output)

    def test_scaffold_with_defaults(self):
        with self.runner.isolated_filesystem():
            result = self.invoke("create", "app", "my-bot", "--no-install", "--no-git", "-y")
            self.assertEqual(result.exit_code, 0, result.output)

            root = Path("my-bot")
            for relative in (
                "main.py",
                "config.yaml",
                "README.md",
                ".gitignore",
                ".env",
                "requirements.txt",
                "commands/ping.py",
                "commands/help.py",
                "listeners/on_ready.py",
            ):
                self.assertTrue((root / relative).is_file(), relative)

            self.assertFalse((root / "ruff.toml").exists())
            self.assertFalse((root / "main.py-tpl").exists())
            self.assertFalse((root / ".git").exists())
            self.assertEqual((root / ".env").read_text(), "DISCORD_TOKEN=\n")
            self.assertIn("# my-bot configuration", (root / "config.yaml").read_text())

            requirements = (root / "requirements.txt").read_text().splitlines()
            self.assertEqual(requirements, ["ferod", "discord.py>=2.3", "python-dotenv"])

            help_source = (root / "commands/help.py").read_text()
            self.assertIn("set_footer(text='my-bot')", help_source)

    def test_scaffolded_files_load(self):
        with self.runner.isolated_filesystem():
            self.invoke("create", "app", "bot", "--no-install", "--no-git", "-y")

            commands, errors = collect(FileModuleSource(Path("bot/commands"), "command"), (Command, CommandBuilder))
            self.assertEqual(errors, [])
            self.assertEqual(sorted(value.build().name for _, value in commands), ["help", "ping"])

            listeners, errors = collect(FileModuleSource(Path("bot/listeners"), "listener"), EventListener)
            self.assertEqual(errors, [])
            self.assertEqual([value.event for _, value in listeners], ["ready"])

    def test_interactive_prompts(self):
        with self.runner.isolated_filesystem():
            result = self.invoke("create", "app", "--no-install", "--no-git", input="prompted\nn\ny\n")
            self.assertEqual(result.exit_code, 0, result.output)

            root = Path("prompted")
            self.assertFalse((root / "commands/help.py").exists())
            self.assertTrue((root / "ruff.toml").is_file())
            self.assertIn("ruff>=0.4", (root / "requirements.txt").read_text())

    def test_default_name(self):
        with self.runner.isolated_filesystem():
            result = self.invoke("create", "app", "--no-install", "--no-git", "-y")
            self.assertEqual(result.exit_code, 0, result.output)
            self.assertTrue(Path("ferod-app/main.py").is_file())

    def test_refuses_non_empty_directory(self):
        with self.runner.isolated_filesystem():
            Path("taken").mkdir()
            Path("taken/file.txt").write_text("x")

            result = self.invoke("create", "app", "taken", "--no-install", "--no-git", "-y")

            self.assertEqual(result.exit_code, 1)
            self.assertIn("not empty", result.output)
            self.assertEqual(os.listdir("taken"), ["file.txt"])

    def test_app_name_without_usable_characters(self):
        with self.runner.isolated_filesystem():
            result = self.runner.invoke(cli, ["create", "app", "!!!", "--no-install", "--no-git", "-y"])
            self.assertEqual(result.exit_code, 2)
            self.assertIn("usable characters", result.output)
            self.assertEqual(os.listdir("."), [])

    def test_unknown_subcommand(self):
        result = self.runner.invoke(cli, ["create", "widget"])
        self.assertNotEqual(result.exit_code, 0)
        self.assertIn("widget", result.output)


class TestCreateFiles(CliTestCase):
    def scaffold(self):
        self.invoke("create", "app", "bot", "--no-install", "--no-git", "-y")
        os.chdir("bot")

    def test_create_command_with_defaults(self):
        with self.runner.isolated_filesystem():
            self.scaffold()
            result = self.invoke("create", "command", "Greet Member", "-y")
            self.assertEqual(result.exit_code, 0, result.output)

            source = Path("commands/greet_member.py").read_text()
            self.assertIn("async def greet_member(client, interaction):", source)
            self.assertIn(".set_name('Greet Member')", source)
            self.assertIn(".set_description('No description provided')", source)
            self.assertIn(".set_category('General')", source)

    def test_create_context_menu_command_interactively(self):
        with self.runner.isolated_filesystem():
            self.scaffold()
            result = self.invoke("create", "command", input="Report\nmessage\nModeration\nmanage_messages\n")
            self.assertEqual(result.exit_code, 0, result.output)

            ((_, builder),), errors = collect(
                FileModuleSource(Path("commands"), "command", pattern="report.py"), CommandBuilder
            )
            self.assertEqual(errors, [])
            command = builder.build()
            self.assertEqual(command.kind, "message")
            self.assertEqual(command.category, "Moderation")
            self.assertEqual(command.permissions, 1 << 13)

    def test_digit_leading_name_is_loaded(self):
        with self.runner.isolated_filesystem():
            self.scaffold()
            result = self.invoke("create", "command", "8ball", "-y")
            self.assertEqual(result.exit_code, 0, result.output)

            path = Path("commands/8ball.py")
            self.assertTrue(path.is_file())
            self.assertIn(path, FileModuleSource(Path("commands"), "command").paths())

            ((_, builder),), errors = collect(
                FileModuleSource(Path("commands"), "command", pattern="8ball.py"), CommandBuilder
            )
            self.assertEqual(errors, [])
            command = builder.build()
            self.assertEqual(command.name, "8ball")
            self.assertEqual(command.handler.__name__, "_8ball")

    def test_quotes_and_backslashes_in_answers(self):
        with self.runner.isolated_filesystem():
            self.scaffold()
            description = 'Say "hi" \\ then leave'
            result = self.invoke("create", "command", 'say "it"', input=f"chat_input\n{description}\nFun\n\n")
            self.assertEqual(result.exit_code, 0, result.output)

            ((_, builder),), errors = collect(
                FileModuleSource(Path("commands"), "command", pattern="say_it.py"), CommandBuilder
            )
            self.assertEqual(errors, [])
            command = builder.build()
            self.assertEqual(command.name, 'say "it"')
            self.assertEqual(command.description, description)

    def test_name_without_usable_characters(self):
        with self.runner.isolated_filesystem():
            self.scaffold()
            result = self.runner.invoke(cli, ["create", "command", "!!!", "-y"])
            self.assertEqual(result.exit_code, 2)
            self.assertIn("usable characters", result.output)
            self.assertEqual(sorted(os.listdir("commands")), ["help.py", "ping.py"])

    def test_unknown_permission_reprompts(self):
        with self.runner.isolated_filesystem():
            self.scaffold()
            result = self.invoke("create", "command", "kick", input="chat_input\nKick\nAdmin\nfly\n\n")
            self.assertEqual(result.exit_code, 0, result.output)
            self.assertIn("Unknown permission(s): fly", result.output)
            self.assertNotIn("set_permissions", Path("commands/kick.py").read_text())

    def test_command_already_exists(self):
        with self.runner.isolated_filesystem():
            self.scaffold()
            result = self.invoke("create", "command", "ping", "-y")
            self.assertEqual(result.exit_code, 1)
            self.assertIn("ping.py already exists", result.output)

    def test_yes_requires_name(self):
        with self.runner.isolated_filesystem():
            self.scaffold()
            result = self.runner.invoke(cli, ["create", "command", "-y"])
            self.assertEqual(result.exit_code, 2)

    def test_outside_project(self):
        with self.runner.isolated_filesystem():
            result = self.invoke("create", "command", "ping", "-y")
            self.assertEqual(result.exit_code, 1)
            self.assertIn("Ferod project", result.output)

    def test_create_listener_via_alias(self):
        with self.runner.isolated_filesystem():
            self.scaffold()
            result = self.invoke("create", "listener", "message", "-y")
            self.assertEqual(result.exit_code, 0, result.output)

            source = Path("listeners/message.py").read_text()
            self.assertIn("async def on_message(client, message):", source)
            self.assertIn("EventListener('message', on_message)", source)

    def test_create_event_interactively(self):
        with self.runner.isolated_filesystem():
            self.scaffold()
            result = self.invoke("create", "event", input="welcome\nmember_join\n")
            self.assertEqual(result.exit_code, 0, result.output)

            ((_, listener),), errors = collect(
                FileModuleSource(Path("listeners"), "listener", pattern="welcome.py"), EventListener
            )
            self.assertEqual(errors, [])
            self.assertEqual(listener.event, "member_join")
            self.assertEqual(listener.handler.__name__, "on_welcome")


if __name__ == "__main__":
    unittest.main()

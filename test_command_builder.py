import unittest
from unittest.mock import Mock

import discord
from discord.app_commands import Choice

from ferod import (
    CommandBuilder,
    CommandType,
    HandlerError,
    MessageCommand,
    MissingFieldError,
    Option,
    OptionType,
    SlashCommand,
    UnexpectedFieldError,
    UserCommand,
    get_options,
)


async def noop(client, interaction):
    pass


def complete_builder() -> CommandBuilder:
    return (
        CommandBuilder()
        .set_name("ping")
        .set_description("Replies with pong")
        .set_category("Utility")
        .set_handler(noop)
    )


class TestCommandBuilder(unittest.TestCase):
    def test_builds_slash_command_by_default(self):
        command = complete_builder().build()

        self.assertIsInstance(command, SlashCommand)
        self.assertIs(command.type, CommandType.chat_input)
        self.assertEqual(command.name, "ping")
        self.assertEqual(command.options, ())
        self.assertIsNone(command.permissions)

    def test_setters_in_any_order(self):
        command = (
            CommandBuilder()
            .set_handler(noop)
            .set_category("Utility")
            .set_description("Replies with pong")
            .set_name("ping")
            .data
        )
        self.assertEqual(command, complete_builder().build())

    def test_missing_name_reported_at_build_time(self):
        builder = CommandBuilder().set_description("d").set_category("c").set_handler(noop)

        with self.assertRaises(MissingFieldError) as ctx:
            builder.data
        self.assertEqual(ctx.exception.field, "name")
        self.assertIn("name", str(ctx.exception))

    def test_missing_fields_checked_in_order(self):
        with self.assertRaises(MissingFieldError) as ctx:
            CommandBuilder().build()
        self.assertEqual(ctx.exception.field, "name")

        with self.assertRaises(MissingFieldError) as ctx:
            CommandBuilder().set_name("x").build()
        self.assertEqual(ctx.exception.field, "category")

        with self.assertRaises(MissingFieldError) as ctx:
            CommandBuilder().set_name("x").set_category("c").build()
        self.assertEqual(ctx.exception.field, "handler")

    def test_slash_command_requires_description(self):
        builder = CommandBuilder().set_name("x").set_category("c").set_handler(noop)
        with self.assertRaises(MissingFieldError) as ctx:
            builder.build()
        self.assertEqual(ctx.exception.field, "description")

    def test_context_menu_commands(self):
        base = CommandBuilder().set_name("Report").set_category("Moderation").set_handler(noop)

        self.assertIsInstance(base.set_type(CommandType.user).build(), UserCommand)
        self.assertIsInstance(base.set_type("message").build(), MessageCommand)
        self.assertIsInstance(base.set_type(3).build(), MessageCommand)
        self.assertIsInstance(base.set_type("user").build(), UserCommand)
        self.assertIsInstance(base.set_type(CommandType.message).build(), MessageCommand)
        self.assertIsInstance(base.set_type(2).build(), UserCommand)

    def test_unknown_type(self):
        with self.assertRaises(ValueError):
            CommandBuilder().set_type("slash")
        with self.assertRaises(ValueError):
            CommandBuilder().set_type(9)

    def test_context_menu_rejects_description_and_options(self):
        builder = (
            CommandBuilder()
            .set_name("Report")
            .set_category("Moderation")
            .set_handler(noop)
            .set_type(CommandType.message)
        )
        with self.assertRaises(UnexpectedFieldError) as ctx:
            builder.set_description("nope").build()
        self.assertEqual(ctx.exception.field, "description")

        builder.set_description("")
        with self.assertRaises(UnexpectedFieldError) as ctx:
            builder.set_options(Option("x", "y")).build()
        self.assertEqual(ctx.exception.field, "options")

    def test_permissions_are_combined(self):
        command = complete_builder().set_permissions(
            "send_messages", discord.Permissions(manage_messages=True), 8
        ).build()

        expected = discord.Permissions(send_messages=True, manage_messages=True, administrator=True)
        self.assertEqual(command.permissions, expected.value)

    def test_explicit_zero_permissions_kept(self):
        command = complete_builder().set_permissions(0).build()
        self.assertEqual(command.permissions, 0)
        self.assertEqual(command.to_payload()["default_member_permissions"], "0")

        unset = complete_builder().set_permissions("administrator").set_permissions().build()
        self.assertIsNone(unset.to_payload()["default_member_permissions"])

    def test_unknown_permission_name(self):
        with self.assertRaises(ValueError):
            complete_builder().set_permissions("fly")

    def test_options_accept_dicts_and_nested_lists(self):
        command = complete_builder().set_options(
            [Option("a", "first"), {"name": "b", "description": "second", "type": 4, "required": True}],
            Option("c", "third", type=OptionType.boolean),
        ).build()

        self.assertEqual([o.name for o in command.options], ["a", "b", "c"])
        self.assertIs(command.options[1].type, OptionType.integer)
        self.assertTrue(command.options[1].required)

    def test_descriptors_are_immutable(self):
        command = complete_builder().build()
        with self.assertRaises(Exception):
            command.name = "pong"


class TestPayload(unittest.TestCase):
    def test_slash_payload(self):
        command = complete_builder().set_permissions("administrator").set_options(
            Option(
                "unit",
                "Unit to use",
                required=True,
                choices=(Choice(name="Metric", value="m"), Choice(name="Imperial", value="i")),
            ),
            Option("count", "How many", type=OptionType.integer, min_value=0),
        ).build()

        self.assertEqual(
            command.to_payload(),
            {
                "name": "ping",
                "type": 1,
                "description": "Replies with pong",
                "default_member_permissions": "8",
                "options": [
                    {
                        "name": "unit",
                        "description": "Unit to use",
                        "type": 3,
                        "required": True,
                        "choices": [{"name": "Metric", "value": "m"}, {"name": "Imperial", "value": "i"}],
                    },
                    {"name": "count", "description": "How many", "type": 4, "min_value": 0},
                ],
            },
        )

    def test_category_and_handler_not_sent(self):
        payload = complete_builder().build().to_payload()
        self.assertNotIn("category", payload)
        self.assertNotIn("handler", payload)
        self.assertIsNone(payload["default_member_permissions"])

    def test_context_payload(self):
        command = UserCommand(name="Profile", category="Info", handler=noop)
        self.assertEqual(
            command.to_payload(),
            {"name": "Profile", "type": 2, "description": "", "default_member_permissions": None},
        )

    def test_option_round_trip_from_dict(self):
        option = Option(
            "group",
            "A group",
            type=OptionType.subcommand_group,
            options=(Option("sub", "A sub", type=OptionType.subcommand),),
        )
        self.assertEqual(Option.from_dict(option.to_dict()), option)

    def test_option_from_dict_with_enum_members(self):
        option = Option.from_dict(
            {
                "name": "where",
                "description": "Channel",
                "type": OptionType.channel,
                "channel_types": [discord.ChannelType.text, 2],
            }
        )
        self.assertIs(option.type, OptionType.channel)
        self.assertEqual(option.channel_types, (discord.ChannelType.text, discord.ChannelType.voice))
        self.assertIs(Option.from_dict({"name": "n", "description": "d", "type": "integer"}).type, OptionType.integer)


class TestHelpText(unittest.TestCase):
    def test_plain_arguments(self):
        command = SlashCommand(
            name="ban",
            description="Ban a member",
            category="Moderation",
            handler=noop,
            options=(
                Option("user", "User to ban", type=OptionType.user, required=True),
                Option("reason", "Why"),
            ),
        )
        self.assertEqual(command.usage, "`/ban <user> [reason]`")
        self.assertEqual(command.arguments, "`user (User)`: User to ban\n`[reason] (String)`: Why")

    def test_no_options(self):
        command = complete_builder().build()
        self.assertEqual(command.usage, "`/ping`")
        self.assertEqual(command.arguments, "")

    def test_subcommands(self):
        command = SlashCommand(
            name="config",
            description="Settings",
            category="Admin",
            handler=noop,
            options=(
                Option(
                    "get",
                    "Read a value",
                    type=OptionType.subcommand,
                    options=(Option("key", "Key", required=True),),
                ),
                Option("reset", "Reset everything", type=OptionType.subcommand),
            ),
        )
        self.assertEqual(command.usage, "`/config get <key>`\n`/config reset`")
        self.assertEqual(
            command.arguments,
            "`get`: Read a value\n`get key (String)`: Key\n`reset`: Reset everything",
        )

    def test_subcommand_groups(self):
        command = SlashCommand(
            name="role",
            description="Roles",
            category="Admin",
            handler=noop,
            options=(
                Option(
                    "color",
                    "Role colors",
                    type=OptionType.subcommand_group,
                    options=(
                        Option("set", "Set a color", type=OptionType.subcommand,
                               options=(Option("hex", "Hex code", required=True),)),
                        Option("clear", "Clear the color", type=OptionType.subcommand),
                    ),
                ),
            ),
        )
        tree = command.options_tree()
        self.assertEqual([[o.name for o in row] for row in tree], [["color", "set", "hex"], ["color", "clear"]])
        self.assertEqual(command.usage, "`/role color set <hex>`\n`/role color clear`")
        self.assertEqual(command.arguments.splitlines()[0], "`color`: Role colors")
        self.assertEqual(command.arguments.count("`color`: Role colors"), 1)


class TestInvoke(unittest.IsolatedAsyncioTestCase):
    async def test_async_handler_receives_client_and_interaction(self):
        seen = []

        async def handler(client, interaction):
            seen.append((client, interaction))

        command = complete_builder().set_handler(handler).build()
        await command.invoke("client", "interaction")
        self.assertEqual(seen, [("client", "interaction")])

    async def test_sync_handler(self):
        handler = Mock(return_value=None)
        command = complete_builder().set_handler(handler).build()
        await command.invoke("client", "interaction")
        handler.assert_called_once_with("client", "interaction")

    async def test_handler_failure_wrapped(self):
        async def handler(client, interaction):
            raise KeyError("boom")

        command = complete_builder().set_handler(handler).build()
        with self.assertRaises(HandlerError) as ctx:
            await command.invoke(None, None)
        self.assertEqual(ctx.exception.name, "ping")
        self.assertIsInstance(ctx.exception.__cause__, KeyError)


class TestGetOptions(unittest.TestCase):
    def test_flattens_subcommands(self):
        interaction = Mock()
        interaction.data = {
            "name": "config",
            "options": [
                {"name": "get", "type": 1, "options": [{"name": "key", "type": 3, "value": "prefix"}]},
            ],
        }
        self.assertEqual(get_options(interaction), {"key": "prefix"})

    def test_no_options(self):
        interaction = Mock()
        interaction.data = {"name": "ping"}
        self.assertEqual(get_options(interaction), {})


if __name__ == "__main__":
    unittest.main()

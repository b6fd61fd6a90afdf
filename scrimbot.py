"""Discord entry point for the scrim registration and check-in bot."""

from __future__ import annotations

import asyncio
import logging
import sys
from datetime import timedelta

import discord
from discord import app_commands

from scrim_bot.checkin import CheckinLedger
from scrim_bot.config import EnvironmentConfig
from scrim_bot.discord_gateway import DiscordGuildGateway
from scrim_bot.health import HealthServer
from scrim_bot.lobbies import LobbyAllocator
from scrim_bot.router import (
    CREATE_LEADERBOARD,
    CREATE_SCRIM,
    DELETE_TEAM_COMMAND,
    InteractionRouter,
    SlashCommand,
)
from scrim_bot.schedule import ScrimScheduleStore
from scrim_bot.scheduler import ScrimScheduler
from scrim_bot.storage import ScrimStorage
from scrim_bot.teams import TeamRegistry
from scrim_bot.validation import DAYS_OF_WEEK
from scrim_bot.verification import ChallengeManager
from scrim_bot.views import (
    CheckInButton,
    RegistrationPanelView,
    TransferButton,
    actor_from_interaction,
    route_interaction,
)

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"

log = logging.getLogger("scrim-bot")

DAY_CHOICES = [app_commands.Choice(name=day, value=day) for day in DAYS_OF_WEEK]


class ScrimClient(discord.Client):
    def __init__(self, config: EnvironmentConfig) -> None:
        intents = discord.Intents.default()
        intents.guilds = True
        intents.members = True
        super().__init__(intents=intents)

        self.config = config
        self.tree = app_commands.CommandTree(self)
        self.guild_object = discord.Object(id=config.guild_id)
        self.health = HealthServer(config.port)
        self._layout_ready = False

        self.storage = ScrimStorage.open(config.db_path)
        self.registry = TeamRegistry(self.storage)
        self.schedules = ScrimScheduleStore(self.storage)
        self.ledger = CheckinLedger(self.storage, self.registry, self.schedules)
        self.challenges = ChallengeManager(
            ttl=timedelta(minutes=config.challenge_ttl_minutes)
        )
        self.gateway = DiscordGuildGateway(self, config.guild_id)
        self.allocator = LobbyAllocator(
            self.registry,
            self.ledger,
            self.gateway,
            max_group_size=config.lobby_size,
        )
        self.scheduler = ScrimScheduler(
            self.schedules,
            self.ledger,
            self.challenges,
            self.allocator,
            self.gateway,
            tz=config.timezone,
            reset_checkins_after_lobbies=config.reset_checkins_after_lobbies,
        )
        self.router = InteractionRouter(
            registry=self.registry,
            schedules=self.schedules,
            scheduler=self.scheduler,
            gateway=self.gateway,
            tz=config.timezone,
            leaderboard_title=config.leaderboard_title,
        )

    async def setup_hook(self) -> None:  # pragma: no cover - Discord lifecycle hook
        self.add_view(RegistrationPanelView())
        self.add_dynamic_items(CheckInButton, TransferButton)
        for command in (
            create_scrim_command,
            create_leaderboard_command,
            delete_team_command,
        ):
            self.tree.add_command(command, guild=self.guild_object)
        try:
            await self.tree.sync(guild=self.guild_object)
            log.info("Commands synced to guild %s", self.config.guild_id)
        except discord.HTTPException as exc:
            log.warning("Command registration failed: %s", exc)
        await self.health.start()

    async def on_ready(self) -> None:  # pragma: no cover - Discord lifecycle hook
        if not self._layout_ready:
            try:
                await self.gateway.ensure_layout()
                self._layout_ready = True
            except discord.HTTPException:
                log.exception("Could not prepare the guild layout")
            self.scheduler.arm_all()
            self.scheduler.start(self.config.poll_seconds)
        log.info("Scrim bot ready as %s", self.user)

    async def close(self) -> None:  # pragma: no cover - Discord lifecycle hook
        self.scheduler.stop()
        await self.health.stop()
        await super().close()
        self.storage.close()


async def _run_command(
    interaction: discord.Interaction, name: str, options: dict[str, object]
) -> None:
    request = SlashCommand(
        actor=actor_from_interaction(interaction), name=name, options=options
    )
    await route_interaction(interaction, request)


@app_commands.command(name=CREATE_SCRIM, description="Create or update a weekly scrim")
@app_commands.describe(
    scrim_name="Scrim name (also used for its announcement channel)",
    day_of_week="Day the check-in window opens",
    start_time="Check-in opens at HH:MM (24h)",
    end_time="Check-in closes at HH:MM (24h)",
    mention_role="Role pinged when check-in opens",
)
@app_commands.choices(day_of_week=DAY_CHOICES)
@app_commands.default_permissions(administrator=True)
@app_commands.guild_only()
async def create_scrim_command(  # pragma: no cover - Discord slash command wiring
    interaction: discord.Interaction,
    scrim_name: str,
    day_of_week: app_commands.Choice[str],
    start_time: str,
    end_time: str,
    mention_role: discord.Role,
) -> None:
    await _run_command(
        interaction,
        CREATE_SCRIM,
        {
            "scrim_name": scrim_name,
            "day_of_week": day_of_week.value,
            "start_time": start_time,
            "end_time": end_time,
            "mention_role": str(mention_role.id),
        },
    )


@app_commands.command(
    name=CREATE_LEADERBOARD, description="Render a leaderboard image from results"
)
@app_commands.describe(
    scrim_name="Scrim the results belong to",
    data="Rows of team,placement,kills separated by ';' or new lines",
)
@app_commands.default_permissions(administrator=True)
@app_commands.guild_only()
async def create_leaderboard_command(  # pragma: no cover - Discord slash command wiring
    interaction: discord.Interaction,
    scrim_name: str,
    data: str,
) -> None:
    await _run_command(
        interaction,
        CREATE_LEADERBOARD,
        {"scrim_name": scrim_name, "data": data},
    )


@app_commands.command(name=DELETE_TEAM_COMMAND, description="Remove a registered team")
@app_commands.describe(team_name="Exact team name")
@app_commands.default_permissions(administrator=True)
@app_commands.guild_only()
async def delete_team_command(  # pragma: no cover - Discord slash command wiring
    interaction: discord.Interaction,
    team_name: str,
) -> None:
    await _run_command(interaction, DELETE_TEAM_COMMAND, {"team_name": team_name})


async def main() -> None:  # pragma: no cover - CLI entry point
    logging.basicConfig(level=logging.INFO, format=LOG_FORMAT)
    try:
        config = EnvironmentConfig.load()
    except RuntimeError as exc:
        log.error("%s", exc)
        sys.exit(1)

    client = ScrimClient(config)
    async with client:
        await client.start(config.discord_token)


def run() -> None:  # pragma: no cover - console script
    asyncio.run(main())


if __name__ == "__main__":
    run()

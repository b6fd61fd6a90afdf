"""Dispatch inbound button presses, form submissions and slash commands.

Requests arrive as plain dataclasses so the routing can be exercised without
a Discord connection; the discord.py layer converts interactions into these
and turns the returned :class:`Reply` back into a response.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from datetime import UTC, datetime, tzinfo

from .checkin import transfer_checked_in_role
from .errors import (
    ConflictError,
    ExpiredError,
    MismatchError,
    NotFoundError,
    PermissionDeniedError,
    ScrimError,
    ValidationError,
)
from .gateway import GuildGateway
from .leaderboard import build_leaderboard
from .models import Team
from .schedule import ScrimScheduleStore
from .scheduler import ScrimScheduler
from .teams import TeamRegistry
from .validation import MAX_TAG_LENGTH, parse_player_lines

log = logging.getLogger(__name__)

REGISTER_TEAM = "register_team"
EDIT_TEAM = "edit_team"
DELETE_TEAM = "delete_team"
CHECKIN_PREFIX = "checkin_"
TRANSFER_PREFIX = "transfer_"
REGISTER_FORM = "modal_register"
EDIT_FORM = "modal_edit"
CAPTCHA_FORM_PREFIX = "captcha_modal_"
CAPTCHA_FIELD = "captcha_input"

CREATE_SCRIM = "create_scrim"
CREATE_LEADERBOARD = "create_leaderboard"
DELETE_TEAM_COMMAND = "delete_team"

ADMIN_ONLY = "Admin only."
REGISTER_CONFLICT = "Could not register team. Name might already exist."
UPDATE_CONFLICT = "Could not update team. Name might already exist."
EXPIRED_MESSAGE = "Captcha expired. Click Register again."
MISMATCH_MESSAGE = "Incorrect CAPTCHA."
INTERNAL_ERROR = "Internal error"


@dataclass(frozen=True, slots=True)
class Actor:
    user_id: str
    tag: str
    is_admin: bool = False


@dataclass(frozen=True, slots=True)
class ButtonPress:
    actor: Actor
    custom_id: str


@dataclass(frozen=True, slots=True)
class FormSubmission:
    actor: Actor
    custom_id: str
    fields: Mapping[str, str]

    def value(self, key: str) -> str:
        return (self.fields.get(key) or "").strip()


@dataclass(frozen=True, slots=True)
class SlashCommand:
    actor: Actor
    name: str
    options: Mapping[str, object]

    def option(self, key: str) -> str:
        value = self.options.get(key)
        return "" if value is None else str(value)


Request = ButtonPress | FormSubmission | SlashCommand


@dataclass(slots=True)
class FormField:
    key: str
    label: str
    default: str = ""
    required: bool = True
    max_length: int | None = None
    paragraph: bool = False


@dataclass(slots=True)
class FormRequest:
    custom_id: str
    title: str
    fields: list[FormField] = field(default_factory=list)


@dataclass(slots=True)
class Reply:
    content: str = ""
    ephemeral: bool = True
    form: FormRequest | None = None
    attachment: bytes | None = None
    filename: str | None = None


def team_form(custom_id: str, title: str, team: Team | None = None) -> FormRequest:
    players = ""
    if team is not None:
        players = "\n".join(
            name
            for name in (team.player2_name, team.player3_name, team.substitute_name)
            if name
        )
    return FormRequest(
        custom_id=custom_id,
        title=title,
        fields=[
            FormField("team_name", "Team Name", team.name if team else ""),
            FormField(
                "team_tag",
                f"Team Tag (no brackets, max {MAX_TAG_LENGTH})",
                team.tag if team else "",
                max_length=MAX_TAG_LENGTH,
            ),
            FormField(
                "captain",
                "Captain In-game name & UID",
                team.captain_name if team else "",
            ),
            FormField(
                "players",
                "Player2, Player3, Sub: name & UID per line",
                players,
                paragraph=True,
            ),
            FormField(
                "mentions",
                "Mention teammates (e.g. @user @user)",
                paragraph=True,
            ),
        ],
    )


def captcha_form(scrim_name: str, phrase: str) -> FormRequest:
    return FormRequest(
        custom_id=f"{CAPTCHA_FORM_PREFIX}{scrim_name}",
        title="Enter CAPTCHA to check-in",
        fields=[FormField(CAPTCHA_FIELD, f"Type this exactly: {phrase}")],
    )


class InteractionRouter:
    def __init__(
        self,
        *,
        registry: TeamRegistry,
        schedules: ScrimScheduleStore,
        scheduler: ScrimScheduler,
        gateway: GuildGateway,
        tz: tzinfo,
        leaderboard_title: str,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._registry = registry
        self._schedules = schedules
        self._scheduler = scheduler
        self._gateway = gateway
        self._tz = tz
        self._leaderboard_title = leaderboard_title
        self._clock = clock or (lambda: datetime.now(UTC))

    async def dispatch(self, request: Request) -> Reply:
        try:
            if isinstance(request, ButtonPress):
                return await self._on_button(request)
            if isinstance(request, FormSubmission):
                return await self._on_form(request)
            if isinstance(request, SlashCommand):
                return await self._on_command(request)
            raise TypeError(f"Unsupported request: {type(request).__name__}")
        except ExpiredError:
            return Reply(EXPIRED_MESSAGE)
        except MismatchError:
            return Reply(MISMATCH_MESSAGE)
        except (
            ValidationError,
            ConflictError,
            PermissionDeniedError,
            NotFoundError,
        ) as exc:
            return Reply(str(exc))
        except ScrimError as exc:
            log.error("Request %s failed: %s", request, exc)
            return Reply(INTERNAL_ERROR)
        except Exception:  # pylint: disable=broad-except
            log.exception("Interaction error for %s", request)
            return Reply(INTERNAL_ERROR)

    # ----- Buttons -----
    async def _on_button(self, request: ButtonPress) -> Reply:
        actor = request.actor
        custom_id = request.custom_id
        if custom_id == REGISTER_TEAM:
            return Reply(form=team_form(REGISTER_FORM, "Register Team"))
        if custom_id == EDIT_TEAM:
            team = self._registry.find_by_captain(actor.user_id)
            if team is None:
                raise NotFoundError("No team found to edit.")
            return Reply(form=team_form(EDIT_FORM, f"Edit Team: {team.name}", team))
        if custom_id == DELETE_TEAM:
            team = self._registry.delete(actor.user_id, is_privileged=actor.is_admin)
            await self._gateway.log_event(f"Team {team.name} deleted by {actor.tag}")
            return Reply(f"Team {team.name} deleted.")
        if custom_id.startswith(CHECKIN_PREFIX):
            scrim_name = custom_id.removeprefix(CHECKIN_PREFIX)
            phrase = self._scheduler.begin_checkin(
                actor.user_id, scrim_name, now=self._clock()
            )
            return Reply(form=captcha_form(scrim_name, phrase))
        if custom_id.startswith(TRANSFER_PREFIX):
            team_name = custom_id.removeprefix(TRANSFER_PREFIX)
            new_holder = await transfer_checked_in_role(
                self._registry, self._gateway, actor.user_id, team_name
            )
            return Reply(f"IDP role transferred to <@{new_holder}>")
        log.warning("Unknown button %s pressed by %s", custom_id, actor.user_id)
        return Reply("Unknown action.")

    # ----- Forms -----
    async def _on_form(self, request: FormSubmission) -> Reply:
        actor = request.actor
        custom_id = request.custom_id
        if custom_id == REGISTER_FORM:
            players = parse_player_lines(request.value("players"))
            try:
                team = self._registry.register(
                    request.value("team_name"),
                    request.value("team_tag"),
                    actor.user_id,
                    request.value("captain"),
                    players,
                    request.value("mentions"),
                )
            except ConflictError:
                return Reply(REGISTER_CONFLICT)
            await self._gateway.log_event(
                f"Team registered: **{team.name}** by {actor.tag}"
            )
            return Reply(f"Team {team.name} registered successfully")
        if custom_id == EDIT_FORM:
            players = parse_player_lines(request.value("players"))
            try:
                team = self._registry.edit(
                    actor.user_id,
                    request.value("team_name"),
                    request.value("team_tag"),
                    request.value("captain"),
                    players,
                    request.value("mentions"),
                )
            except ConflictError:
                return Reply(UPDATE_CONFLICT)
            return Reply(f"Team updated to {team.name}")
        if custom_id.startswith(CAPTCHA_FORM_PREFIX):
            scrim_name = custom_id.removeprefix(CAPTCHA_FORM_PREFIX)
            team = await self._scheduler.complete_checkin(
                actor.user_id,
                scrim_name,
                request.value(CAPTCHA_FIELD),
                now=self._clock(),
            )
            return Reply(f"Team {team.name} checked-in for {scrim_name}.")
        log.warning("Unknown form %s submitted by %s", custom_id, actor.user_id)
        return Reply("Unknown action.")

    # ----- Slash commands -----
    async def _on_command(self, request: SlashCommand) -> Reply:
        if not request.actor.is_admin:
            raise PermissionDeniedError(ADMIN_ONLY)
        if request.name == CREATE_SCRIM:
            scrim = self._schedules.upsert(
                request.option("scrim_name"),
                request.option("day_of_week"),
                request.option("start_time"),
                request.option("end_time"),
                request.option("mention_role"),
            )
            await self._gateway.ensure_announcement_channel(scrim)
            self._scheduler.arm(scrim, self._clock())
            return Reply(
                f"Scrim {scrim.name} scheduled for {scrim.day_of_week} "
                f"{scrim.start_time}-{scrim.end_time}"
            )
        if request.name == CREATE_LEADERBOARD:
            scrim_name = request.option("scrim_name")
            image = build_leaderboard(
                request.option("data"),
                now=self._clock(),
                tz=self._tz,
                title=self._leaderboard_title,
            )
            return Reply(
                ephemeral=False,
                attachment=image,
                filename=f"leaderboard_{scrim_name}.png",
            )
        if request.name == DELETE_TEAM_COMMAND:
            team_name = request.option("team_name").strip()
            if self._registry.delete_by_name(team_name):
                await self._gateway.log_event(
                    f"Team {team_name} deleted by {request.actor.tag}"
                )
            return Reply(f"Team {team_name} removed (if existed).")
        log.warning("Unknown command %s", request.name)
        return Reply("Unknown command.")


__all__ = [
    "Actor",
    "ButtonPress",
    "FormField",
    "FormRequest",
    "FormSubmission",
    "InteractionRouter",
    "Reply",
    "Request",
    "SlashCommand",
    "captcha_form",
    "team_form",
]

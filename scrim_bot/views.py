"""discord.py components that feed interactions into the router."""

from __future__ import annotations

import io
import logging
import re
from typing import Any

import discord

from .router import (
    CHECKIN_PREFIX,
    DELETE_TEAM,
    EDIT_TEAM,
    REGISTER_TEAM,
    TRANSFER_PREFIX,
    Actor,
    ButtonPress,
    FormRequest,
    FormSubmission,
    Reply,
    Request,
)

log = logging.getLogger(__name__)

PANEL_TEXT = (
    "Welcome to Farlight 84 Scrim Registration! "
    "Use buttons below to manage your team."
)
MODAL_TITLE_LIMIT = 45


def actor_from_interaction(interaction: discord.Interaction) -> Actor:
    user = interaction.user
    is_admin = (
        isinstance(user, discord.Member) and user.guild_permissions.administrator
    )
    return Actor(user_id=str(user.id), tag=str(user), is_admin=is_admin)


async def deliver_reply(interaction: discord.Interaction, reply: Reply) -> None:
    if reply.form is not None and not interaction.response.is_done():
        await interaction.response.send_modal(FormModal(reply.form))
        return

    kwargs: dict[str, Any] = {"ephemeral": reply.ephemeral}
    if reply.attachment is not None:
        kwargs["file"] = discord.File(
            io.BytesIO(reply.attachment), filename=reply.filename or "image.png"
        )
    content = reply.content or None
    if interaction.response.is_done():
        await interaction.followup.send(content, **kwargs)
    else:
        await interaction.response.send_message(content, **kwargs)


async def route_interaction(interaction: discord.Interaction, request: Request) -> None:
    router = getattr(interaction.client, "router", None)
    if router is None:  # pragma: no cover - client not wired yet
        log.error("Interaction %s arrived before the router was ready", request)
        return
    reply = await router.dispatch(request)
    try:
        await deliver_reply(interaction, reply)
    except discord.HTTPException as exc:
        log.warning("Failed to answer interaction %s: %s", request, exc)


class FormModal(discord.ui.Modal):
    def __init__(self, form: FormRequest) -> None:
        super().__init__(
            title=form.title[:MODAL_TITLE_LIMIT], custom_id=form.custom_id
        )
        self.form = form
        self.inputs: dict[str, discord.ui.TextInput] = {}
        for field in form.fields:
            text_input = discord.ui.TextInput(
                label=field.label,
                default=field.default or None,
                required=field.required,
                max_length=field.max_length,
                style=(
                    discord.TextStyle.paragraph
                    if field.paragraph
                    else discord.TextStyle.short
                ),
            )
            self.inputs[field.key] = text_input
            self.add_item(text_input)

    def values(self) -> dict[str, str]:
        return {key: text_input.value for key, text_input in self.inputs.items()}

    async def on_submit(self, interaction: discord.Interaction) -> None:
        submission = FormSubmission(
            actor=actor_from_interaction(interaction),
            custom_id=self.form.custom_id,
            fields=self.values(),
        )
        await route_interaction(interaction, submission)


class RegistrationPanelView(discord.ui.View):
    """Persistent Register / Edit / Delete panel in ``scrim-register``."""

    def __init__(self) -> None:
        super().__init__(timeout=None)

    async def _press(self, interaction: discord.Interaction, custom_id: str) -> None:
        await route_interaction(
            interaction, ButtonPress(actor_from_interaction(interaction), custom_id)
        )

    @discord.ui.button(
        label="📝 Register Team",
        style=discord.ButtonStyle.success,
        custom_id=REGISTER_TEAM,
    )
    async def register_team(  # type: ignore[override]
        self, interaction: discord.Interaction, _button: discord.ui.Button
    ) -> None:
        await self._press(interaction, REGISTER_TEAM)

    @discord.ui.button(
        label="✏️ Edit Team",
        style=discord.ButtonStyle.primary,
        custom_id=EDIT_TEAM,
    )
    async def edit_team(  # type: ignore[override]
        self, interaction: discord.Interaction, _button: discord.ui.Button
    ) -> None:
        await self._press(interaction, EDIT_TEAM)

    @discord.ui.button(
        label="🗑️ Delete Team",
        style=discord.ButtonStyle.danger,
        custom_id=DELETE_TEAM,
    )
    async def delete_team(  # type: ignore[override]
        self, interaction: discord.Interaction, _button: discord.ui.Button
    ) -> None:
        await self._press(interaction, DELETE_TEAM)


class CheckInButton(
    discord.ui.DynamicItem[discord.ui.Button],
    template=re.escape(CHECKIN_PREFIX) + r"(?P<scrim>.+)",
):
    def __init__(self, scrim_name: str) -> None:
        super().__init__(
            discord.ui.Button(
                label="Register (Check-in)",
                style=discord.ButtonStyle.success,
                custom_id=f"{CHECKIN_PREFIX}{scrim_name}",
            )
        )
        self.scrim_name = scrim_name

    @classmethod
    async def from_custom_id(  # type: ignore[override]
        cls,
        interaction: discord.Interaction,
        item: discord.ui.Button,
        match: re.Match[str],
    ) -> CheckInButton:
        return cls(match["scrim"])

    async def callback(self, interaction: discord.Interaction) -> None:
        await route_interaction(
            interaction,
            ButtonPress(
                actor_from_interaction(interaction),
                f"{CHECKIN_PREFIX}{self.scrim_name}",
            ),
        )


class TransferButton(
    discord.ui.DynamicItem[discord.ui.Button],
    template=re.escape(TRANSFER_PREFIX) + r"(?P<team>.+)",
):
    def __init__(self, team_name: str) -> None:
        super().__init__(
            discord.ui.Button(
                label="Transfer IDP Role",
                style=discord.ButtonStyle.primary,
                custom_id=f"{TRANSFER_PREFIX}{team_name}",
            )
        )
        self.team_name = team_name

    @classmethod
    async def from_custom_id(  # type: ignore[override]
        cls,
        interaction: discord.Interaction,
        item: discord.ui.Button,
        match: re.Match[str],
    ) -> TransferButton:
        return cls(match["team"])

    async def callback(self, interaction: discord.Interaction) -> None:
        await route_interaction(
            interaction,
            ButtonPress(
                actor_from_interaction(interaction),
                f"{TRANSFER_PREFIX}{self.team_name}",
            ),
        )


def single_item_view(item: discord.ui.Item) -> discord.ui.View:
    view = discord.ui.View(timeout=None)
    view.add_item(item)
    return view


__all__ = [
    "CheckInButton",
    "FormModal",
    "PANEL_TEXT",
    "RegistrationPanelView",
    "TransferButton",
    "actor_from_interaction",
    "deliver_reply",
    "route_interaction",
    "single_item_view",
]

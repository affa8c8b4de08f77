import json
import os

import discord
from discord import app_commands
from dotenv import load_dotenv

from styngr.config import Configuration
from styngr.errors import StyngrError
from styngr.models.session import PlaylistSession
from styngr.models.statistics import TrackEvent
from styngr.service import StyngrService
from styngr.ui.embeds import error_embed, now_playing_embed, playlists_embed

load_dotenv()


class RadioBot(discord.Client):
    def __init__(self, service: StyngrService):
        intents = discord.Intents.default()
        intents.voice_states = True
        super().__init__(intents=intents)

        self.tree = app_commands.CommandTree(self)
        self.service = service

    async def setup_hook(self):
        if not self.service.configured:
            self.service.set_configuration(Configuration.from_env())

        # Guild-specific sync is instant; global sync can take up to an hour
        test_guild_id = os.getenv("TEST_GUILD_ID")
        if test_guild_id:
            guild = discord.Object(id=int(test_guild_id))
            self.tree.copy_global_to(guild=guild)
            await self.tree.sync(guild=guild)
        else:
            await self.tree.sync()

    async def close(self):
        await self.service.close()
        await super().close()


bot = RadioBot(StyngrService())


async def send_track(interaction: discord.Interaction, session: PlaylistSession) -> None:
    """Show the new track and hand the user's client its playable asset."""
    user_id = interaction.user.id
    bot.service.record_client_event(user_id, TrackEvent.PLAYED)

    playlist = bot.service.sessions.get_catalog(user_id).get(session.playlist_id)
    await interaction.followup.send(
        embed=now_playing_embed(session, playlist, listening=bot.service.is_listening(user_id))
    )

    client_track = bot.service.build_client_track(user_id, session.track)
    await interaction.followup.send(
        f"```json\n{json.dumps(client_track.to_dict())}\n```",
        ephemeral=True,
    )


@bot.tree.command(name="playlists", description="List the radio playlists you can listen to")
async def playlists(interaction: discord.Interaction):
    await interaction.response.defer(ephemeral=True)
    try:
        await bot.service.get_playlists(interaction.user.id)
    except StyngrError as e:
        await interaction.followup.send(embed=error_embed(str(e)), ephemeral=True)
        return

    catalog = bot.service.sessions.get_catalog(interaction.user.id)
    await interaction.followup.send(embed=playlists_embed(list(catalog.values())), ephemeral=True)


@bot.tree.command(name="listen", description="Start listening to a radio playlist")
@app_commands.describe(playlist="Playlist ID from /playlists")
async def listen(interaction: discord.Interaction, playlist: str):
    await interaction.response.defer()
    try:
        session = await bot.service.start_playlist_session(interaction.user.id, playlist)
        await send_track(interaction, session)
    except StyngrError as e:
        await interaction.followup.send(embed=error_embed(str(e)))


@bot.tree.command(name="next", description="Move on to the next track")
async def next_track(interaction: discord.Interaction):
    await interaction.response.defer()
    try:
        session = await bot.service.request_next_track(interaction.user.id)
        await send_track(interaction, session)
    except StyngrError as e:
        await interaction.followup.send(embed=error_embed(str(e)))


@bot.tree.command(name="skip", description="Skip the current track")
async def skip(interaction: discord.Interaction):
    await interaction.response.defer()
    try:
        session = await bot.service.skip_track(interaction.user.id)
        await send_track(interaction, session)
    except StyngrError as e:
        await interaction.followup.send(embed=error_embed(str(e)))


async def _report_event(interaction: discord.Interaction, event: TrackEvent, reply: str):
    try:
        bot.service.record_client_event(interaction.user.id, event)
    except StyngrError as e:
        await interaction.response.send_message(embed=error_embed(str(e)), ephemeral=True)
        return
    await interaction.response.send_message(reply, ephemeral=True)


@bot.tree.command(name="pause", description="Pause playback")
async def pause(interaction: discord.Interaction):
    await _report_event(interaction, TrackEvent.PAUSED, "Paused.")


@bot.tree.command(name="resume", description="Resume playback")
async def resume(interaction: discord.Interaction):
    await _report_event(interaction, TrackEvent.RESUMED, "Resumed.")


@bot.tree.command(name="nowplaying", description="Show the track you are listening to")
async def now_playing(interaction: discord.Interaction):
    user_id = interaction.user.id
    session = bot.service.sessions.get_session(user_id)
    if not session:
        await interaction.response.send_message(
            embed=error_embed("Nothing is playing."),
            ephemeral=True,
        )
        return

    playlist = bot.service.sessions.get_catalog(user_id).get(session.playlist_id)
    await interaction.response.send_message(
        embed=now_playing_embed(session, playlist, listening=bot.service.is_listening(user_id)),
        ephemeral=True,
    )


@bot.tree.command(name="stop", description="Stop listening and end your session")
async def stop(interaction: discord.Interaction):
    session = await bot.service.end_session(interaction.user.id)
    if not session:
        await interaction.response.send_message(
            embed=error_embed("Nothing is playing."),
            ephemeral=True,
        )
        return
    await interaction.response.send_message("Stopped listening.", ephemeral=True)


@bot.event
async def on_voice_state_update(member: discord.Member, before: discord.VoiceState, after: discord.VoiceState):
    # Leaving voice ends the listener's session
    if before.channel is not None and after.channel is None and bot.service.configured:
        await bot.service.end_session(member.id)


@bot.event
async def on_ready():
    print(f"Logged in as {bot.user} (ID: {bot.user.id})")
    print("------")


def main():
    token = os.getenv("DISCORD_TOKEN")
    if not token:
        raise ValueError("DISCORD_TOKEN environment variable is not set")
    bot.run(token)


if __name__ == "__main__":
    main()

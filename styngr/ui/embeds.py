import discord

from styngr.models.session import PlaylistSession
from styngr.models.track import Playlist

MAX_LISTED_PLAYLISTS = 10


def now_playing_embed(
    session: PlaylistSession,
    playlist: Playlist | None = None,
    listening: bool | None = None,
) -> discord.Embed:
    """Create an embed for the track a user's session is on."""
    track = session.track
    embed = discord.Embed(
        title="Now Playing",
        description=f"**{track.title or 'Untitled'}**",
        color=discord.Color.green(),
    )
    embed.add_field(name="Artist", value=track.artist_str, inline=True)
    embed.add_field(name="Track #", value=str(session.tracks_played), inline=True)

    if playlist and playlist.title:
        embed.add_field(name="Playlist", value=playlist.title, inline=False)

    if listening is not None:
        embed.add_field(name="Status", value="Listening" if listening else "Paused", inline=True)

    if track.is_liked:
        embed.set_footer(text="♥ Liked")
    return embed


def playlists_embed(playlists: list[Playlist]) -> discord.Embed:
    """Create an embed listing the playlists a user can start."""
    embed = discord.Embed(
        title="Radio Playlists",
        color=discord.Color.purple(),
    )

    if not playlists:
        embed.description = "No playlists are available."
        return embed

    lines = [
        f"`{p.id}` **{p.title or 'Untitled'}** ({p.track_count} tracks, {p.duration_str})"
        for p in playlists[:MAX_LISTED_PLAYLISTS]
    ]
    if len(playlists) > MAX_LISTED_PLAYLISTS:
        lines.append(f"\n*...and {len(playlists) - MAX_LISTED_PLAYLISTS} more*")
    embed.description = "\n".join(lines)

    embed.set_footer(text="Use /listen <id> to start one")
    return embed


def error_embed(message: str) -> discord.Embed:
    """Create an error embed."""
    return discord.Embed(
        title="Error",
        description=message,
        color=discord.Color.red(),
    )

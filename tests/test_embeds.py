from conftest import make_track
from styngr.models.session import PlaylistSession
from styngr.models.track import Playlist, Track
from styngr.ui.embeds import MAX_LISTED_PLAYLISTS, error_embed, now_playing_embed, playlists_embed


def _playlist(i: int) -> Playlist:
    return Playlist(id=f"P{i}", title=f"List {i}", description=None, duration=125, track_count=4)


def test_now_playing():
    session = PlaylistSession(
        session_id="S1",
        playlist_id="P1",
        track=Track.from_payload(make_track("T1", title="Tune"), playlist_id="P1"),
        tracks_played=3,
    )
    embed = now_playing_embed(session, _playlist(1))

    assert embed.title == "Now Playing"
    assert "Tune" in embed.description
    fields = {f.name: f.value for f in embed.fields}
    assert fields["Artist"] == "Artist A, Artist B"
    assert fields["Track #"] == "3"
    assert fields["Playlist"] == "List 1"


def test_playlists_listing():
    embed = playlists_embed([_playlist(1), _playlist(2)])
    assert "`P1` **List 1** (4 tracks, 2:05)" in embed.description
    assert "`P2`" in embed.description


def test_playlists_truncated():
    embed = playlists_embed([_playlist(i) for i in range(MAX_LISTED_PLAYLISTS + 3)])
    assert "...and 3 more" in embed.description


def test_no_playlists():
    assert playlists_embed([]).description == "No playlists are available."


def test_error():
    embed = error_embed("boom")
    assert embed.title == "Error"
    assert embed.description == "boom"

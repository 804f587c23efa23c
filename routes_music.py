from fastapi import APIRouter, Depends

from auth import get_current_user
from database import Document, DocumentStore
from dependencies import get_store
from errors import ApiError, NotFoundError, ValidationError
from linking import (
    add_song_to_playlist,
    create_playlist_and_link,
    create_song_and_link_album,
    link_favorite,
    list_favorites,
    resolve_references,
)
from responses import success
from schemas import (
    AlbumCreate,
    FavoriteRequest,
    PlaylistAddSong,
    PlaylistCreate,
    PodcastCreate,
    SongCreate,
)

router = APIRouter(prefix="/music")


def _require(value, field: str) -> str:
    if not value:
        raise ValidationError([{"field": field, "message": f"Please provide {field}"}])
    return value


def _with_songs(store: DocumentStore, doc: Document) -> Document:
    doc["songs"] = resolve_references(store, "song", doc.get("songIds", []))
    return doc


# ---------- FAVORITES ----------

@router.post("/favorites/song", tags=["Favorites"])
def add_favorite_song(
    payload: FavoriteRequest,
    user: Document = Depends(get_current_user),
    store: DocumentStore = Depends(get_store),
):
    try:
        song_id = _require(payload.songId, "songId")
        return success(likeSongId=link_favorite(store, user["id"], "song", song_id))
    except Exception as e:
        raise ApiError("Failed to add song to favorites", e)


@router.post("/favorites/album", tags=["Favorites"])
def add_favorite_album(
    payload: FavoriteRequest,
    user: Document = Depends(get_current_user),
    store: DocumentStore = Depends(get_store),
):
    try:
        album_id = _require(payload.albumId, "albumId")
        return success(likeAlbumId=link_favorite(store, user["id"], "album", album_id))
    except Exception as e:
        raise ApiError("Failed to add album to favorites", e, keep_status=True)


@router.post("/favorites/podcast", tags=["Favorites"])
def add_favorite_podcast(
    payload: FavoriteRequest,
    user: Document = Depends(get_current_user),
    store: DocumentStore = Depends(get_store),
):
    try:
        podcast_id = _require(payload.podcastId, "podcastId")
        return success(likePodcastId=link_favorite(store, user["id"], "podcast", podcast_id))
    except Exception as e:
        raise ApiError("Failed to add podcast to favorites", e, keep_status=True)


@router.get("/favorites", tags=["Favorites"])
def get_favorites(
    user: Document = Depends(get_current_user),
    store: DocumentStore = Depends(get_store),
):
    try:
        return success(**list_favorites(store, user["id"]))
    except Exception as e:
        raise ApiError("Failed to fetch favorites", e, keep_status=True)


# ---------- SONGS ----------

@router.get("/songs", tags=["Songs"])
def list_songs(store: DocumentStore = Depends(get_store)):
    try:
        songs = list(store.find_all("song", expand={"albumId": "album"}))
        return success(songs=songs)
    except Exception as e:
        raise ApiError("Failed to fetch songs", e)


@router.get("/songs/{song_id}", tags=["Songs"])
def get_song(song_id: str, store: DocumentStore = Depends(get_store)):
    try:
        song = store.find_by_id("song", song_id, expand={"albumId": "album"})
        if song is None:
            raise NotFoundError("song", song_id)
        return success(song=song)
    except Exception as e:
        raise ApiError("Failed to fetch song", e, keep_status=True)


@router.post("/songs", status_code=201, tags=["Songs"])
def create_song(
    payload: SongCreate,
    user: Document = Depends(get_current_user),
    store: DocumentStore = Depends(get_store),
):
    try:
        song = create_song_and_link_album(store, user, payload.model_dump())
        return success(song=song)
    except Exception as e:
        raise ApiError("Failed to create song", e, keep_status=True)


# ---------- ALBUMS ----------

@router.get("/albums", tags=["Albums"])
def list_albums(store: DocumentStore = Depends(get_store)):
    try:
        return success(albums=list(store.find_all("album")))
    except Exception as e:
        raise ApiError("Failed to fetch albums", e, keep_status=True)


@router.get("/albums/{album_id}", tags=["Albums"])
def get_album(album_id: str, store: DocumentStore = Depends(get_store)):
    try:
        album = store.find_by_id("album", album_id)
        if album is None:
            raise NotFoundError("album", album_id)
        return success(album=_with_songs(store, album))
    except Exception as e:
        raise ApiError("Failed to fetch album", e, keep_status=True)


@router.post("/albums", status_code=201, tags=["Albums"])
def create_album(
    payload: AlbumCreate,
    user: Document = Depends(get_current_user),
    store: DocumentStore = Depends(get_store),
):
    try:
        fields = payload.model_dump()
        fields["author"] = fields.get("author") or user["username"]
        return success(album=store.create("album", fields))
    except Exception as e:
        raise ApiError("Failed to create album", e, keep_status=True)


# ---------- PODCASTS ----------

@router.get("/podcasts", tags=["Podcasts"])
def list_podcasts(store: DocumentStore = Depends(get_store)):
    try:
        return success(podcasts=list(store.find_all("podcast")))
    except Exception as e:
        raise ApiError("Failed to fetch podcasts", e, keep_status=True)


@router.post("/podcasts", status_code=201, tags=["Podcasts"])
def create_podcast(
    payload: PodcastCreate,
    user: Document = Depends(get_current_user),
    store: DocumentStore = Depends(get_store),
):
    try:
        fields = payload.model_dump()
        fields["author"] = fields.get("author") or user["username"]
        return success(podcast=store.create("podcast", fields))
    except Exception as e:
        raise ApiError("Failed to create podcast", e, keep_status=True)


# ---------- PLAYLISTS ----------

@router.post("/playlist", status_code=201, tags=["Playlist"])
def create_playlist(
    payload: PlaylistCreate,
    user: Document = Depends(get_current_user),
    store: DocumentStore = Depends(get_store),
):
    try:
        playlist = create_playlist_and_link(store, user, payload.name, payload.songIds)
        return success(playlist=playlist)
    except Exception as e:
        raise ApiError("Failed to create playlist", e)


@router.get("/playlists", tags=["Playlist"])
def my_playlists(
    user: Document = Depends(get_current_user),
    store: DocumentStore = Depends(get_store),
):
    try:
        playlists = resolve_references(store, "playlist", user.get("playlistId", []))
        return success(playlists=playlists)
    except Exception as e:
        raise ApiError("Failed to fetch playlists", e, keep_status=True)


@router.get("/playlist/{playlist_id}", tags=["Playlist"])
def get_playlist(playlist_id: str, store: DocumentStore = Depends(get_store)):
    try:
        playlist = store.find_by_id("playlist", playlist_id)
        if playlist is None:
            raise NotFoundError("playlist", playlist_id)
        return success(playlist=_with_songs(store, playlist))
    except Exception as e:
        raise ApiError("Failed to fetch playlist", e, keep_status=True)


@router.post("/playlist/{playlist_id}/songs", tags=["Playlist"])
def add_playlist_song(
    playlist_id: str,
    payload: PlaylistAddSong,
    user: Document = Depends(get_current_user),
    store: DocumentStore = Depends(get_store),
):
    try:
        playlist = add_song_to_playlist(store, user, playlist_id, payload.songId)
        return success(playlist=playlist)
    except Exception as e:
        raise ApiError("Failed to add song to playlist", e, keep_status=True)

"""
Read-modify-link operations across users, songs, albums, playlists and podcasts.

Appends go through `DocumentStore.add_to_set`, a single `$addToSet` update,
so concurrent links to the same list cannot lose each other and a repeated
link is a no-op. Operations touching two documents (create, then link) are
not atomic: when the second step fails the first stays in place and the
error propagates unchanged.
"""

import logging
from typing import Any, Dict, Iterable, List

from database import Document, DocumentStore
from errors import NotFoundError, PermissionDeniedError, ValidationError
from schemas import FAVORITE_FIELDS

logger = logging.getLogger(__name__)


def link_favorite(store: DocumentStore, user_id: str, kind: str, target_id: str) -> List[str]:
    """Add `target_id` to the user's favourites of `kind`; returns the updated list."""
    field = FAVORITE_FIELDS.get(kind)
    if field is None:
        raise ValidationError([{"field": "kind", "message": f"Cannot favourite {kind}"}])
    user = store.add_to_set("user", user_id, field, target_id)
    logger.info(f"User {user_id} favourited {kind} {target_id}")
    return user[field]


def link_favorite_song(store: DocumentStore, user_id: str, song_id: str) -> List[str]:
    return link_favorite(store, user_id, "song", song_id)


def create_playlist_and_link(store: DocumentStore, owner: Document, name: Any, song_ids: Iterable[str]) -> Document:
    """
    Create a playlist authored by `owner` and append it to the owner's playlistId.
    Song ids are stored as given without checking they exist.
    """
    playlist = store.create("playlist", {
        "name": name,
        "author": owner["username"],
        "songIds": list(song_ids or []),
    })
    store.add_to_set("user", owner["id"], "playlistId", playlist["id"])
    logger.info(f"User {owner['id']} created playlist {playlist['id']}")
    return playlist


def create_song_and_link_album(store: DocumentStore, owner: Document, fields: Dict[str, Any]) -> Document:
    """Create a song owned by `owner`; when it names an album, append it to that album's songIds."""
    album_id = fields.get("albumId")
    if album_id and store.find_by_id("album", album_id) is None:
        raise NotFoundError("album", album_id)
    song = store.create("song", {**fields, "createdBy": owner["id"]})
    if song.get("albumId"):
        store.add_to_set("album", song["albumId"], "songIds", song["id"])
        logger.info(f"Song {song['id']} linked to album {song['albumId']}")
    return song


def add_song_to_playlist(store: DocumentStore, owner: Document, playlist_id: str, song_id: str) -> Document:
    """Only the playlist's owner may add to it; repeated adds are no-ops."""
    if store.find_by_id("playlist", playlist_id) is None:
        raise NotFoundError("playlist", playlist_id)
    if playlist_id not in owner.get("playlistId", []):
        raise PermissionDeniedError("You can only modify your own playlists")
    playlist = store.add_to_set("playlist", playlist_id, "songIds", song_id)
    logger.info(f"Song {song_id} added to playlist {playlist_id}")
    return playlist


def resolve_references(store: DocumentStore, kind: str, ids: Iterable[str]) -> List[Document]:
    """Dereference soft references in order, skipping ids that no longer resolve."""
    resolved = []
    for ref in ids or []:
        doc = store.find_by_id(kind, ref)
        if doc is not None:
            resolved.append(doc)
    return resolved


def list_favorites(store: DocumentStore, user_id: str) -> Dict[str, List[Document]]:
    user = store.find_by_id("user", user_id)
    if user is None:
        raise NotFoundError("user", user_id)
    return {
        "songs": resolve_references(store, "song", user.get("likeSongId", [])),
        "albums": resolve_references(store, "album", user.get("likeAlbumId", [])),
        "podcasts": resolve_references(store, "podcast", user.get("likePodcastId", [])),
    }

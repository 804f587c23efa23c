import pytest

from database import DocumentStore
from errors import NotFoundError, ValidationError


def make_user(store, **overrides):
    fields = {"username": "bob", "email": "Bob@Example.com", "password": "hashed-password"}
    fields.update(overrides)
    return store.create("user", fields)


def make_song(store, **overrides):
    fields = {"name": "Amazing Grace", "author": "John Newton", "songUrl": "https://cdn/grace.mp3", "createdBy": "u1"}
    fields.update(overrides)
    return store.create("song", fields)


def test_create_user_applies_defaults_and_hides_password(store, database):
    user = make_user(store)
    assert user["id"]
    assert user["email"] == "bob@example.com"
    assert user["likeSongId"] == []
    assert user["playlistId"] == []
    assert "password" not in user
    assert "createdAt" in user
    assert database["user"].find_one({"_id": user["id"]})["password"] == "hashed-password"


def test_create_user_reports_every_invalid_field(store):
    with pytest.raises(ValidationError) as exc:
        store.create("user", {"username": "ab", "email": "not-an-email"})
    fields = {e["field"] for e in exc.value.errors}
    assert fields == {"username", "email", "password"}
    assert store.db["user"].count_documents({}) == 0


@pytest.mark.parametrize("duplicate", [
    {"username": "bob", "email": "other@example.com"},
    {"username": "robert", "email": "bob@example.com"},
])
def test_duplicate_username_or_email_fails_without_persisting(store, duplicate):
    make_user(store)
    with pytest.raises(ValidationError) as exc:
        make_user(store, **duplicate)
    assert exc.value.errors[0]["field"] in ("username", "email")
    assert store.db["user"].count_documents({}) == 1


def test_song_without_url_is_rejected(store):
    with pytest.raises(ValidationError) as exc:
        store.create("song", {"name": "x", "author": "y", "createdBy": "u1"})
    assert [e["field"] for e in exc.value.errors] == ["songUrl"]


def test_song_defaults(store):
    song = make_song(store)
    assert song["songImage"] == "default-song-image.jpg"
    assert song["genre"] == "Other"
    assert song["duration"] == 0
    assert song["albumId"] is None


def test_song_genre_must_be_known(store):
    with pytest.raises(ValidationError) as exc:
        make_song(store, genre="Polka")
    assert exc.value.errors[0]["field"] == "genre"


def test_collection_image_defaults(store):
    album = store.create("album", {"name": "A", "author": "B"})
    playlist = store.create("playlist", {"name": "P", "author": "B"})
    podcast = store.create("podcast", {"name": "Pod", "author": "B", "songUrl": "https://feed"})
    assert album["songImage"] == "default-album-image.jpg"
    assert playlist["songImage"] == "default-playlist-image.jpg"
    assert podcast["songImage"] == "default-podcast-image.jpg"
    assert album["songIds"] == playlist["songIds"] == podcast["songIds"] == []


def test_podcast_requires_url(store):
    with pytest.raises(ValidationError):
        store.create("podcast", {"name": "Pod", "author": "B"})


@pytest.mark.parametrize("bad_id", ["", None, 42, "not-an-object-id", "0123456789abcdef01234567"])
def test_find_by_id_returns_none_for_unknown_or_malformed_ids(store, bad_id):
    assert store.find_by_id("song", bad_id) is None


def test_find_all_expands_album_and_tolerates_dangling_reference(store):
    album = store.create("album", {"name": "Hymns", "author": "Choir"})
    make_song(store, name="with album", albumId=album["id"])
    make_song(store, name="dangling", albumId="missing-album")
    make_song(store, name="no album")

    songs = {s["name"]: s for s in store.find_all("song", expand={"albumId": "album"})}
    assert songs["with album"]["albumId"]["name"] == "Hymns"
    assert songs["dangling"]["albumId"] is None
    assert songs["no album"]["albumId"] is None


def test_find_all_is_restartable(store):
    cursor = store.find_all("song")
    assert list(cursor) == []
    make_song(store)
    assert len(list(cursor)) == 1
    assert len(list(cursor)) == 1


def test_save_persists_changes_and_keeps_hidden_fields(store, database):
    user = make_user(store)
    user["likeSongId"].append("s1")
    saved = store.save(user)
    assert saved["likeSongId"] == ["s1"]
    assert "password" not in saved
    assert database["user"].find_one({"_id": user["id"]})["password"] == "hashed-password"


def test_save_revalidates(store):
    user = make_user(store)
    user["username"] = "x"
    with pytest.raises(ValidationError):
        store.save(user)


def test_save_rejects_duplicate(store):
    make_user(store)
    other = make_user(store, username="carol", email="carol@example.com")
    other["username"] = "bob"
    with pytest.raises(ValidationError):
        store.save(other)


def test_save_missing_document(store, database):
    user = make_user(store)
    database["user"].delete_one({"_id": user["id"]})
    with pytest.raises(NotFoundError):
        store.save(user)


def test_add_to_set_is_idempotent(store):
    user = make_user(store)
    store.add_to_set("user", user["id"], "likeSongId", "s1")
    store.add_to_set("user", user["id"], "likeSongId", "s2")
    updated = store.add_to_set("user", user["id"], "likeSongId", "s1")
    assert updated["likeSongId"] == ["s1", "s2"]
    assert "password" not in updated


def test_add_to_set_missing_document(store):
    with pytest.raises(NotFoundError):
        store.add_to_set("user", "nobody", "likeSongId", "s1")


def test_uniqueness_holds_without_explicit_index_setup(database):
    store = DocumentStore(database)
    store.create("user", {"username": "abc", "email": "a@b.com", "password": "hashed-password"})
    with pytest.raises(ValidationError):
        store.create("user", {"username": "abc", "email": "other@b.com", "password": "hashed-password"})
    assert database["user"].count_documents({}) == 1


def test_find_by_id_expands_references(store):
    album = store.create("album", {"name": "Hymns", "author": "Choir"})
    song = make_song(store, albumId=album["id"])
    dangling = make_song(store, albumId="missing-album")
    assert store.find_by_id("song", song["id"], expand={"albumId": "album"})["albumId"]["id"] == album["id"]
    assert store.find_by_id("song", dangling["id"], expand={"albumId": "album"})["albumId"] is None
    assert store.find_by_id("song", song["id"])["albumId"] == album["id"]

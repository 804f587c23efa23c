"""
Database Schemas for the music catalog

Each Pydantic model represents a collection in the MongoDB database and is
the validation layer the document store runs before every write.
Collection name is the lowercase of the class name.

- User -> "user"
- Song -> "song"
- Album -> "album"
- Playlist -> "playlist"
- Podcast -> "podcast"

Reference fields hold plain string ids (soft references): nothing checks
that the referenced document exists.
"""

import re
from datetime import datetime, timezone
from enum import Enum
from typing import Dict, List, Optional, Set, Type

from pydantic import BaseModel, ConfigDict, Field, field_validator

EMAIL_RE = re.compile(r"^\w+([.-]?\w+)*@\w+([.-]?\w+)*(\.\w{2,3})+$")


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _strip(v):
    return v.strip() if isinstance(v, str) else v


class Genre(str, Enum):
    WORSHIP = "Worship"
    GOSPEL = "Gospel"
    CHRISTIAN_ROCK = "Christian Rock"
    CONTEMPORARY_CHRISTIAN = "Contemporary Christian"
    HYMN = "Hymn"
    OTHER = "Other"


class User(BaseModel):
    """
    Users collection schema. `password` holds the bcrypt hash and is hidden from reads.
    """
    username: str = Field(..., min_length=3, description="Unique login name")
    email: str = Field(..., description="Unique, lowercased email address")
    password: str = Field(..., min_length=6, description="Password hash")
    likeSongId: List[str] = Field(default_factory=list, description="Favourite Song ids")
    likeAlbumId: List[str] = Field(default_factory=list, description="Favourite Album ids")
    likePodcastId: List[str] = Field(default_factory=list, description="Favourite Podcast ids")
    playlistId: List[str] = Field(default_factory=list, description="Owned Playlist ids")
    createdAt: datetime = Field(default_factory=_now)

    @field_validator("username", mode="before")
    @classmethod
    def strip_username(cls, v):
        return _strip(v)

    @field_validator("email", mode="before")
    @classmethod
    def normalize_email(cls, v):
        return v.strip().lower() if isinstance(v, str) else v

    @field_validator("email")
    @classmethod
    def check_email(cls, v: str) -> str:
        if not EMAIL_RE.match(v):
            raise ValueError("Please enter a valid email")
        return v


class Song(BaseModel):
    """
    Songs collection schema
    """
    model_config = ConfigDict(use_enum_values=True)

    name: str = Field(..., min_length=1, description="Song name")
    author: str = Field(..., min_length=1, description="Artist name")
    songImage: str = Field("default-song-image.jpg", description="Cover image")
    songUrl: str = Field(..., min_length=1, description="Public URL of the audio file")
    albumId: Optional[str] = Field(None, description="Album the song belongs to")
    genre: Genre = Field(Genre.OTHER.value, description="Music genre")
    duration: float = Field(0, ge=0, description="Duration in seconds")
    createdBy: str = Field(..., min_length=1, description="User that created the song")
    createdAt: datetime = Field(default_factory=_now)

    @field_validator("name", mode="before")
    @classmethod
    def strip_name(cls, v):
        return _strip(v)


class Album(BaseModel):
    """
    Albums collection schema
    """
    name: str = Field(..., min_length=1, description="Album name")
    author: str = Field(..., min_length=1, description="Album author")
    songImage: str = Field("default-album-image.jpg", description="Cover image")
    songUrl: Optional[str] = Field(None, description="Optional album URL")
    songIds: List[str] = Field(default_factory=list, description="List of Song document IDs")

    @field_validator("name", mode="before")
    @classmethod
    def strip_name(cls, v):
        return _strip(v)


class Playlist(BaseModel):
    """
    Playlists collection schema
    """
    name: str = Field(..., min_length=1, description="Playlist name")
    author: str = Field(..., min_length=1, description="Username of the owner")
    songImage: str = Field("default-playlist-image.jpg", description="Cover image")
    songUrl: Optional[str] = Field(None, description="Optional playlist URL")
    songIds: List[str] = Field(default_factory=list, description="List of Song document IDs")

    @field_validator("name", mode="before")
    @classmethod
    def strip_name(cls, v):
        return _strip(v)


class Podcast(BaseModel):
    """
    Podcasts collection schema
    """
    name: str = Field(..., min_length=1, description="Podcast name")
    author: str = Field(..., min_length=1, description="Podcast author")
    songImage: str = Field("default-podcast-image.jpg", description="Cover image")
    songUrl: str = Field(..., min_length=1, description="Podcast feed or audio URL")
    songIds: List[str] = Field(default_factory=list, description="List of Song document IDs")

    @field_validator("name", mode="before")
    @classmethod
    def strip_name(cls, v):
        return _strip(v)


COLLECTIONS: Dict[str, Type[BaseModel]] = {
    "user": User,
    "song": Song,
    "album": Album,
    "playlist": Playlist,
    "podcast": Podcast,
}

# Fields excluded from reads unless explicitly requested
HIDDEN_FIELDS: Dict[str, Set[str]] = {
    "user": {"password"},
}

# Unique fields, enforced by the store with unique indexes
UNIQUE_FIELDS: Dict[str, List[str]] = {
    "user": ["username", "email"],
}

# User list field that holds favourites of each kind
FAVORITE_FIELDS: Dict[str, str] = {
    "song": "likeSongId",
    "album": "likeAlbumId",
    "podcast": "likePodcastId",
}


# ---------- REQUEST BODIES ----------

class RegisterRequest(BaseModel):
    username: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None


class LoginRequest(BaseModel):
    email: str
    password: str


class FavoriteRequest(BaseModel):
    songId: Optional[str] = None
    albumId: Optional[str] = None
    podcastId: Optional[str] = None


class PlaylistCreate(BaseModel):
    name: Optional[str] = None
    songIds: List[str] = Field(default_factory=list)


class PlaylistAddSong(BaseModel):
    songId: str


class SongCreate(BaseModel):
    name: Optional[str] = None
    author: Optional[str] = None
    songUrl: Optional[str] = None
    songImage: Optional[str] = None
    albumId: Optional[str] = None
    genre: Optional[str] = None
    duration: Optional[float] = None


class AlbumCreate(BaseModel):
    name: Optional[str] = None
    author: Optional[str] = None
    songImage: Optional[str] = None
    songUrl: Optional[str] = None
    songIds: List[str] = Field(default_factory=list)


class PodcastCreate(BaseModel):
    name: Optional[str] = None
    author: Optional[str] = None
    songUrl: Optional[str] = None
    songImage: Optional[str] = None
    songIds: List[str] = Field(default_factory=list)

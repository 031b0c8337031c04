from datetime import datetime

from beanie import Document, Indexed
from pydantic import BaseModel, ConfigDict, Field

NAME_MAX_LEN = 100

# Record fields clients may sort by; both are indexed in the collection.
SORTABLE_FIELDS = frozenset({"id", "name"})


class AnimeRecord(BaseModel):
    """Plain anime record handed across the service boundary."""

    model_config = ConfigDict(frozen=True)

    id: str | None = None
    name: str | None = None


class Anime(Document):
    name: Indexed(str) | None = None
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    class Settings:
        name = "animes"

    def to_record(self) -> AnimeRecord:
        return AnimeRecord(id=str(self.id) if self.id is not None else None, name=self.name)

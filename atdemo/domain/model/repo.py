"""Content repository models (profiles, posts, custom records)."""

from typing import Any

from pydantic import Field

from atdemo.domain.model.common import DomainModel

RECIPE_COLLECTION = "com.myrecipes.recipe"


class Profile(DomainModel):
    """Actor profile as shown on the home page."""

    did: str
    handle: str
    display_name: str | None = None
    followers_count: int = 0
    follows_count: int = 0
    posts_count: int = 0


class FeedPost(DomainModel):
    """One entry of an author feed."""

    uri: str
    text: str = ""
    created_at: str | None = None


class RecordRef(DomainModel):
    """Reference to a record written to a repository."""

    uri: str
    cid: str | None = None


class RepoRecord(DomainModel):
    """A record read back from a repository collection."""

    uri: str
    value: dict[str, Any]


class Recipe(DomainModel):
    """Custom ``com.myrecipes.recipe`` record."""

    title: str
    ingredients: list[str] = Field(default_factory=list)
    steps: list[str] = Field(default_factory=list)
    created_at: str | None = None

    def to_record(self) -> dict[str, Any]:
        """Lexicon representation for putRecord."""
        return {
            "$type": RECIPE_COLLECTION,
            "title": self.title,
            "ingredients": self.ingredients,
            "steps": self.steps,
            "createdAt": self.created_at,
        }

    @classmethod
    def from_record(cls, value: dict[str, Any]) -> "Recipe":
        """Parse a stored record, tolerating missing fields."""
        return cls(
            title=str(value.get("title") or ""),
            ingredients=[str(i) for i in value.get("ingredients") or []],
            steps=[str(s) for s in value.get("steps") or []],
            created_at=value.get("createdAt"),
        )

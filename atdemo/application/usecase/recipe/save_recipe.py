"""Save recipe use case."""

from datetime import datetime, timezone

import logfire
from pydantic import BaseModel

from atdemo.domain.error import ValidationError
from atdemo.domain.model import RECIPE_COLLECTION, AuthorizedSession, Recipe
from atdemo.domain.service import RepositoryClient
from atdemo.util.tid import next_tid

from ..base import BaseUseCase


class SaveRecipeRequest(BaseModel):
    """Save recipe request.

    Ingredients and steps arrive as free text, one item per line.
    """

    session: AuthorizedSession
    title: str | None
    ingredients: str | None
    steps: str | None


class SaveRecipeResponse(BaseModel):
    """Save recipe response."""

    uri: str
    rkey: str


def _lines(text: str | None) -> list[str]:
    return [line.strip() for line in (text or "").splitlines() if line.strip()]


class SaveRecipeUseCase(BaseUseCase[SaveRecipeRequest, SaveRecipeResponse]):
    """Use case for writing a com.myrecipes.recipe record."""

    def __init__(self, repository_client: RepositoryClient) -> None:
        """Initialize save recipe use case.

        Args:
            repository_client: Authorized repository client
        """
        self.repository_client = repository_client

    async def execute(self, request: SaveRecipeRequest) -> SaveRecipeResponse:
        """Validate the form and put the record under a fresh TID.

        Raises:
            ValidationError: If title, ingredients or steps are missing
            AdapterError: If the PDS rejects the write or cannot be reached
        """
        title = (request.title or "").strip()
        ingredients = _lines(request.ingredients)
        steps = _lines(request.steps)

        if not title or not ingredients or not steps:
            raise ValidationError("Title, ingredients, and steps are required")

        recipe = Recipe(
            title=title,
            ingredients=ingredients,
            steps=steps,
            created_at=datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
        )
        rkey = next_tid()

        with logfire.span("save_recipe.execute", did=request.session.did, rkey=rkey):
            ref = await self.repository_client.put_record(
                request.session, RECIPE_COLLECTION, rkey, recipe.to_record()
            )

        return SaveRecipeResponse(uri=ref.uri, rkey=rkey)

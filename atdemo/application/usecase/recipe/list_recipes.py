"""List recipes use case."""

from pydantic import BaseModel

from atdemo.domain.model import RECIPE_COLLECTION, AuthorizedSession, Recipe
from atdemo.domain.service import RepositoryClient

from ..base import BaseUseCase


class ListRecipesRequest(BaseModel):
    """List recipes request."""

    session: AuthorizedSession
    limit: int = 20


class RecipeItem(BaseModel):
    """Recipe with its record URI."""

    uri: str
    recipe: Recipe


class ListRecipesResponse(BaseModel):
    """List recipes response."""

    recipes: list[RecipeItem]


class ListRecipesUseCase(BaseUseCase[ListRecipesRequest, ListRecipesResponse]):
    """Use case for listing the user's recipe records."""

    def __init__(self, repository_client: RepositoryClient) -> None:
        self.repository_client = repository_client

    async def execute(self, request: ListRecipesRequest) -> ListRecipesResponse:
        """List recipe records; malformed records are shown with blank fields."""
        records = await self.repository_client.list_records(
            request.session, RECIPE_COLLECTION, limit=request.limit
        )
        return ListRecipesResponse(
            recipes=[
                RecipeItem(uri=record.uri, recipe=Recipe.from_record(record.value))
                for record in records
            ]
        )

"""Application layer DI providers."""

from dishka import Scope, provide

from atdemo.application.usecase.feed import CreatePostUseCase, GetHomeUseCase
from atdemo.application.usecase.recipe import ListRecipesUseCase, SaveRecipeUseCase
from atdemo.domain.service import RepositoryClient
from atdemo.util.di.base import ProviderBase


class ProdApplicationProvider(ProviderBase):
    """Production application use cases provider - concrete, no mocks needed."""

    # Feed use cases
    @provide(scope=Scope.REQUEST)
    def get_home_use_case(self, repository_client: RepositoryClient) -> GetHomeUseCase:
        """Provide get home use case."""
        return GetHomeUseCase(repository_client=repository_client)

    @provide(scope=Scope.REQUEST)
    def get_create_post_use_case(
        self, repository_client: RepositoryClient
    ) -> CreatePostUseCase:
        """Provide create post use case."""
        return CreatePostUseCase(repository_client=repository_client)

    # Recipe use cases
    @provide(scope=Scope.REQUEST)
    def get_save_recipe_use_case(
        self, repository_client: RepositoryClient
    ) -> SaveRecipeUseCase:
        """Provide save recipe use case."""
        return SaveRecipeUseCase(repository_client=repository_client)

    @provide(scope=Scope.REQUEST)
    def get_list_recipes_use_case(
        self, repository_client: RepositoryClient
    ) -> ListRecipesUseCase:
        """Provide list recipes use case."""
        return ListRecipesUseCase(repository_client=repository_client)

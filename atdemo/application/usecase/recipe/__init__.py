"""Recipe record use cases."""

from .list_recipes import ListRecipesUseCase
from .save_recipe import SaveRecipeUseCase

__all__ = ["ListRecipesUseCase", "SaveRecipeUseCase"]

"""Recipe custom record routes."""

from typing import Annotated

from dishka.integrations.fastapi import DishkaRoute, FromDishka
from fastapi import APIRouter, Form, Request, Response, status
from fastapi.responses import HTMLResponse

from atdemo.application.usecase.recipe import ListRecipesUseCase, SaveRecipeUseCase
from atdemo.application.usecase.recipe.list_recipes import ListRecipesRequest
from atdemo.application.usecase.recipe.save_recipe import SaveRecipeRequest
from atdemo.domain.error import ValidationError
from atdemo.interface.api import pages
from atdemo.interface.api.authorizer import RequestAuthorizer
from atdemo.interface.api.responses import redirect

router = APIRouter(tags=["recipes"], route_class=DishkaRoute)


@router.post("/recipe", response_class=HTMLResponse)
async def save_recipe(
    request: Request,
    response: Response,
    authorizer: FromDishka[RequestAuthorizer],
    save_recipe_use_case: FromDishka[SaveRecipeUseCase],
    title: Annotated[str | None, Form()] = None,
    ingredients: Annotated[str | None, Form()] = None,
    steps: Annotated[str | None, Form()] = None,
):
    """Save a com.myrecipes.recipe record (one ingredient/step per line)."""
    session = await authorizer.authorize(request, response)
    if session is None:
        return redirect("/login", response)

    try:
        await save_recipe_use_case.execute(
            SaveRecipeRequest(
                session=session, title=title, ingredients=ingredients, steps=steps
            )
        )
    except ValidationError as e:
        response.status_code = status.HTTP_400_BAD_REQUEST
        return pages.message_page(str(e))

    return redirect("/recipes", response)


@router.get("/recipes", response_class=HTMLResponse)
async def list_recipes(
    request: Request,
    response: Response,
    authorizer: FromDishka[RequestAuthorizer],
    list_recipes_use_case: FromDishka[ListRecipesUseCase],
):
    """List the signed-in user's recipes."""
    session = await authorizer.authorize(request, response)
    if session is None:
        return redirect("/login", response)

    result = await list_recipes_use_case.execute(ListRecipesRequest(session=session))
    return pages.recipes_page(result.recipes)

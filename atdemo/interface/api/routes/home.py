"""Home page and post routes."""

from typing import Annotated

from dishka.integrations.fastapi import DishkaRoute, FromDishka
from fastapi import APIRouter, Form, Request, Response, status
from fastapi.responses import HTMLResponse

from atdemo.application.usecase.feed import CreatePostUseCase, GetHomeUseCase
from atdemo.application.usecase.feed.create_post import CreatePostRequest
from atdemo.application.usecase.feed.get_home import GetHomeRequest
from atdemo.domain.error import ValidationError
from atdemo.interface.api import pages
from atdemo.interface.api.authorizer import RequestAuthorizer
from atdemo.interface.api.responses import redirect

router = APIRouter(tags=["home"], route_class=DishkaRoute)


@router.get("/", response_class=HTMLResponse)
async def home(
    request: Request,
    response: Response,
    authorizer: FromDishka[RequestAuthorizer],
    get_home: FromDishka[GetHomeUseCase],
):
    """Profile and recent posts when signed in, landing page otherwise."""
    session = await authorizer.authorize(request, response)
    if session is None:
        return pages.landing_page()

    result = await get_home.execute(GetHomeRequest(session=session))
    return pages.home_page(result.profile, result.posts)


@router.post("/post", response_class=HTMLResponse)
async def create_post(
    request: Request,
    response: Response,
    authorizer: FromDishka[RequestAuthorizer],
    create_post_use_case: FromDishka[CreatePostUseCase],
    text: Annotated[str | None, Form()] = None,
):
    """Publish a post for the signed-in user.

    Responses:
        302: To / after posting, or to /login when not signed in
        400: Post text missing
    """
    session = await authorizer.authorize(request, response)
    if session is None:
        return redirect("/login", response)

    try:
        await create_post_use_case.execute(CreatePostRequest(session=session, text=text))
    except ValidationError as e:
        response.status_code = status.HTTP_400_BAD_REQUEST
        return pages.message_page(str(e))

    return redirect("/", response)

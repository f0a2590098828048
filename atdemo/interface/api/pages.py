"""HTML pages.

Every interpolated value goes through ``html.escape``; profile fields, post
text and recipe records are user-controlled.
"""

import html

from atdemo.application.usecase.recipe.list_recipes import RecipeItem
from atdemo.domain.model import FeedPost, Profile

APP_TITLE = "AT Protocol App"


def _e(value: object) -> str:
    return html.escape("" if value is None else str(value))


def _layout(title: str, body: str) -> str:
    return f"""<!DOCTYPE html>
<html>
<head><meta charset="utf-8"><title>{_e(title)}</title></head>
<body>
{body}
</body>
</html>"""


def landing_page() -> str:
    return _layout(
        APP_TITLE,
        """<h1>AT Protocol Demo</h1>
<p>A simple app using AT Protocol OAuth.</p>
<a href="/login">Login with Bluesky</a>""",
    )


def login_page(error: str | None = None) -> str:
    """Handle-entry form, optionally with an error message above it."""
    error_html = f'<p role="alert">{_e(error)}</p>' if error else ""
    return _layout(
        f"Login | {APP_TITLE}",
        f"""<h1>Login</h1>
{error_html}
<form action="/login" method="post">
  <input type="text" name="handle" placeholder="Enter your handle (e.g. alice.bsky.social)" required />
  <button type="submit">Login</button>
</form>""",
    )


def error_page(heading: str, message: str | None = None) -> str:
    """Failure page with a link back to the login form."""
    message_html = f"<p>{_e(message)}</p>" if message else ""
    return _layout(
        f"{heading} | {APP_TITLE}",
        f"""<h1>{_e(heading)}</h1>
{message_html}
<a href="/login">Try again</a>""",
    )


def message_page(message: str) -> str:
    """Plain message page (form validation failures)."""
    return _layout(APP_TITLE, f"""<p>{_e(message)}</p>
<p><a href="/">Back to home</a></p>""")


def home_page(profile: Profile, posts: list[FeedPost]) -> str:
    """Authenticated home: profile, post form, recent posts, recipe form."""
    posts_html = "\n".join(
        f"<li><strong>{_e(post.created_at)}</strong>: {_e(post.text)}</li>"
        for post in posts
    )
    return _layout(
        APP_TITLE,
        f"""<h1>Welcome, {_e(profile.display_name or profile.handle)}!</h1>
<p>Handle: @{_e(profile.handle)}</p>
<p>DID: {_e(profile.did)}</p>
<p>Followers: {profile.followers_count} | Following: {profile.follows_count} | Posts: {profile.posts_count}</p>

<h2>Create a Post</h2>
<form action="/post" method="post">
  <textarea name="text" rows="3" cols="50" placeholder="What's on your mind?" required></textarea>
  <br/>
  <button type="submit">Post</button>
</form>

<h2>Your Recent Posts</h2>
<ul>{posts_html}</ul>

<hr/>

<h2>Save a Recipe (Custom Record)</h2>
<form action="/recipe" method="post">
  <label>Title:</label><br/>
  <input type="text" name="title" placeholder="e.g. Banana Bread" required/>
  <br/><br/>
  <label>Ingredients (one per line):</label><br/>
  <textarea name="ingredients" rows="4" cols="50" required></textarea>
  <br/><br/>
  <label>Steps (one per line):</label><br/>
  <textarea name="steps" rows="4" cols="50" required></textarea>
  <br/><br/>
  <button type="submit">Save Recipe</button>
</form>
<p><a href="/recipes">View your recipes</a></p>

<hr/>

<form action="/logout" method="post">
  <button type="submit">Logout</button>
</form>""",
    )


def recipes_page(items: list[RecipeItem]) -> str:
    """List of the user's recipe records."""
    if not items:
        recipes_html = "<p>No recipes yet. Go add one!</p>"
    else:
        blocks = []
        for item in items:
            recipe = item.recipe
            ingredients = "".join(f"<li>{_e(i)}</li>" for i in recipe.ingredients)
            steps = "".join(f"<li>{_e(s)}</li>" for s in recipe.steps)
            blocks.append(
                f"""<div class="recipe">
  <h3>{_e(recipe.title)}</h3>
  <p><em>{_e(recipe.created_at)}</em></p>
  <strong>Ingredients:</strong>
  <ul>{ingredients}</ul>
  <strong>Steps:</strong>
  <ol>{steps}</ol>
</div>"""
            )
        recipes_html = "\n".join(blocks)

    return _layout(
        f"My Recipes | {APP_TITLE}",
        f"""<h1>Your Recipes</h1>
{recipes_html}
<p><a href="/">Back to home</a></p>""",
    )

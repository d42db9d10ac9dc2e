"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, Request
from fastapi.responses import JSONResponse

from dog_matcher.api.models import BreedRequest, LoginRequest, SortRequest, ZipRequest
from dog_matcher.app_logging import configure_logging
from dog_matcher.containers import AppContainer
from dog_matcher.domain.errors import (
    ApiError,
    AuthExpiredError,
    DogMatcherError,
    InvalidCredentialsError,
    InvalidSortError,
    InvalidZipFormatError,
    MatchRecordMissingError,
    NoMatchFoundError,
    TransportError,
)
from dog_matcher.services.search import SESSION_EXPIRED_MESSAGE
from dog_matcher.services.session import SearchSession, SessionView

LOGIN_REDIRECT = "/"
_SERVER_ERROR = 500

_STATUS_BY_ERROR: tuple[tuple[type[DogMatcherError], int], ...] = (
    (AuthExpiredError, 401),
    (TransportError, 503),
    (ApiError, 502),
    (NoMatchFoundError, 404),
    (MatchRecordMissingError, 404),
    (InvalidZipFormatError, 422),
    (InvalidSortError, 422),
    (InvalidCredentialsError, 422),
)


def require_session(request: Request) -> SearchSession:
    """Return the active session or reject the request as unauthenticated.

    The app serves a single user: the check reads the one process-wide session
    and does not identify callers, so it is not access control.
    """
    container: AppContainer = request.app.state.container
    if not container.session.authenticated:
        raise AuthExpiredError(SESSION_EXPIRED_MESSAGE, 401, request.url.path)
    return container.session


def create_app(container: AppContainer) -> FastAPI:  # noqa: PLR0915
    """Create a FastAPI app configured with dependencies."""
    configure_logging(container.settings.debug)
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    @app.exception_handler(DogMatcherError)
    async def handle_domain_error(
        request: Request, exc: DogMatcherError
    ) -> JSONResponse:
        status_code = _status_for(exc)
        if status_code >= _SERVER_ERROR:
            logger.warning("Catalog call failed on %s: %s", request.url.path, exc)
        payload: dict[str, object] = {"kind": exc.kind, "message": exc.message}
        if isinstance(exc, ApiError) and exc.is_auth_expired:
            payload["redirect"] = LOGIN_REDIRECT
        return JSONResponse(status_code=status_code, content=payload)

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.post("/session/login")
    async def login(body: LoginRequest, request: Request) -> JSONResponse:
        """Log in and load the first page of results."""
        session: SearchSession = request.app.state.container.session
        await session.login(body.name, body.email)
        await session.refresh()
        return _view_response(session.view(), message="Login successful")

    @app.post("/session/logout")
    async def logout(request: Request) -> dict[str, object]:
        """Log out; the caller is always sent back to login."""
        session: SearchSession = request.app.state.container.session
        acknowledged = await session.logout()
        message = (
            "Logout successful"
            if acknowledged
            else "Failed to logout. Please try again."
        )
        return {
            "acknowledged": acknowledged,
            "message": message,
            "redirect": LOGIN_REDIRECT,
        }

    @app.get("/breeds")
    async def breeds(
        session: SearchSession = Depends(require_session),
    ) -> dict[str, list[str]]:
        """Return the breeds available for filtering."""
        return {"breeds": await session.list_breeds()}

    @app.get("/search")
    async def current_search(
        session: SearchSession = Depends(require_session),
    ) -> JSONResponse:
        """Return the current session view without querying."""
        return _view_response(session.view())

    @app.post("/search/breeds")
    async def add_breed(
        body: BreedRequest, session: SearchSession = Depends(require_session)
    ) -> JSONResponse:
        """Filter by an additional breed."""
        await session.add_breed(body.breed)
        return _view_response(session.view())

    @app.delete("/search/breeds/{breed}")
    async def remove_breed(
        breed: str, session: SearchSession = Depends(require_session)
    ) -> JSONResponse:
        """Stop filtering by a breed."""
        await session.remove_breed(breed)
        return _view_response(session.view())

    @app.put("/search/sort")
    async def set_sort(
        body: SortRequest, session: SearchSession = Depends(require_session)
    ) -> JSONResponse:
        """Change the result ordering."""
        await session.set_sort(body.sort)
        return _view_response(session.view())

    @app.post("/search/zips")
    async def add_zip(
        body: ZipRequest, session: SearchSession = Depends(require_session)
    ) -> JSONResponse:
        """Resolve a ZIP code and filter by it."""
        location = await session.add_zip(body.zip_code)
        message = None
        if location is not None:
            label = session.resolver.label_for(body.zip_code)
            message = f"Added {label} to your search"
        return _view_response(session.view(), message=message)

    @app.delete("/search/zips/{zip_code}")
    async def remove_zip(
        zip_code: str, session: SearchSession = Depends(require_session)
    ) -> JSONResponse:
        """Stop filtering by a ZIP code."""
        await session.remove_zip(zip_code)
        return _view_response(session.view())

    @app.post("/search/next")
    async def next_page(
        session: SearchSession = Depends(require_session),
    ) -> JSONResponse:
        """Show the following page."""
        await session.next_page()
        return _view_response(session.view())

    @app.post("/search/previous")
    async def previous_page(
        session: SearchSession = Depends(require_session),
    ) -> JSONResponse:
        """Show the preceding page."""
        await session.previous_page()
        return _view_response(session.view())

    @app.post("/search/refresh")
    async def refresh(
        session: SearchSession = Depends(require_session),
    ) -> JSONResponse:
        """Retry the current query."""
        await session.refresh()
        return _view_response(session.view())

    @app.post("/favorites/{dog_id}")
    async def toggle_favorite(
        dog_id: str, session: SearchSession = Depends(require_session)
    ) -> dict[str, object]:
        """Add or remove a favorite."""
        session.toggle_favorite(dog_id)
        return {
            "favorites": session.favorites.ids(),
            "count": session.favorites.count(),
            "is_favorite": session.favorites.is_favorite(dog_id),
        }

    @app.post("/match")
    async def generate_match(
        session: SearchSession = Depends(require_session),
    ) -> dict[str, object]:
        """Generate a match among the favorites."""
        dog = await session.generate_match()
        return {
            "dog": dog.model_dump(),
            "message": f"You've been matched with {dog.name}!",
        }

    @app.delete("/match")
    async def dismiss_match(
        session: SearchSession = Depends(require_session),
    ) -> dict[str, str]:
        """Close the match result."""
        session.dismiss_match()
        return {"status": session.matcher.state.status}

    return app


def _status_for(exc: DogMatcherError) -> int:
    for error_type, status_code in _STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            return status_code
    return 400


def _view_response(view: SessionView, message: str | None = None) -> JSONResponse:
    """Serialize a session view, answering 401 when the session expired."""
    payload = _view_payload(view)
    if message:
        payload["message"] = message
    if view.search.auth_expired:
        payload["redirect"] = LOGIN_REDIRECT
        return JSONResponse(status_code=401, content=payload)
    return JSONResponse(content=payload)


def _view_payload(view: SessionView) -> dict[str, object]:
    search = view.search
    match = view.match
    return {
        "filters": {
            "breeds": list(view.filters.breeds),
            "zip_codes": list(view.filters.zip_codes),
            "sort": str(view.filters.sort),
            "cursor": view.filters.cursor,
        },
        "locations": [location.model_dump() for location in view.locations],
        "search": {
            "status": search.status,
            "error": search.error,
            "error_kind": search.error_kind,
            "total": search.page.total if search.page else 0,
            "dogs": [dog.model_dump() for dog in search.dogs],
            "is_empty": search.is_empty,
            "has_next": search.has_next,
            "has_previous": search.has_previous,
        },
        "favorites": list(view.favorites),
        "can_generate_match": view.can_generate_match,
        "match": {
            "status": match.status,
            "dog": match.dog.model_dump() if match.dog else None,
            "error": match.error,
        },
    }

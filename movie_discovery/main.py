"""FastAPI entrypoint wiring the favorites store, navigation and TMDb panels."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from datetime import date

from fastapi import APIRouter, Depends, FastAPI, HTTPException, Query, Request, status
from pydantic import BaseModel, Field

from movie_discovery.core.config import Settings, get_settings
from movie_discovery.db import KeyValueStore, SqlKeyValueStore, init_models
from movie_discovery.services.favorites import FavoritesStore
from movie_discovery.services.models import MovieDetail, MovieSummary
from movie_discovery.services.navigation import NavigationController, View
from movie_discovery.services.panels import CatalogPanel, DetailPanel
from movie_discovery.services.tmdb import TMDbClient


logger = logging.getLogger(__name__)
router = APIRouter()


class MovieIn(BaseModel):
    id: int
    title: str
    poster_path: str | None = None
    release_date: str | None = None
    vote_average: float | None = None
    vote_count: int | None = None


class MovieCard(BaseModel):
    id: int
    title: str
    poster_url: str
    release_date: date | None = None
    release_label: str
    vote_average: float | None = None
    vote_count: int | None = None
    is_favorite: bool = False


class GenreOut(BaseModel):
    id: int
    name: str


class MovieDetailOut(MovieCard):
    tagline: str | None = None
    overview: str
    runtime: int | None = None
    genres: list[GenreOut] = Field(default_factory=list)
    budget: int | None = None
    revenue: int | None = None
    backdrop_url: str
    homepage: str | None = None
    imdb_id: str | None = None


class StateResponse(BaseModel):
    view: View
    movie_id: int | None = None
    favorites_count: int


class CatalogResponse(BaseModel):
    query: str
    loading: bool
    error: str | None = None
    message: str | None = None
    movies: list[MovieCard]


class DetailResponse(BaseModel):
    movie_id: int | None = None
    loading: bool
    error: str | None = None
    movie: MovieDetailOut | None = None


class FavoritesResponse(BaseModel):
    message: str | None = None
    movies: list[MovieCard]


class FavoriteStatus(BaseModel):
    id: int
    is_favorite: bool
    favorites_count: int


def create_app(
    *,
    settings: Settings | None = None,
    kv_store: KeyValueStore | None = None,
    client: TMDbClient | None = None,
) -> FastAPI:
    """Build the app with one owned favorites store, controller and panel set."""

    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Ensure tables exist and restore favorites before serving."""

        store = kv_store
        if store is None:
            init_models()
            store = SqlKeyValueStore()
        tmdb = client or TMDbClient(settings=settings)
        detail = DetailPanel(tmdb)
        app.state.client = tmdb
        app.state.favorites = FavoritesStore(store, key=settings.favorites_key)
        app.state.navigation = NavigationController([detail.on_navigate])
        app.state.catalog = CatalogPanel(tmdb)
        app.state.detail = detail
        logger.info("Movie discovery service ready")
        yield

    app = FastAPI(title="Movie Discovery Service", lifespan=lifespan)
    app.include_router(router)
    return app


def get_client(request: Request) -> TMDbClient:
    return request.app.state.client


def get_favorites(request: Request) -> FavoritesStore:
    return request.app.state.favorites


def get_navigation(request: Request) -> NavigationController:
    return request.app.state.navigation


def get_catalog(request: Request) -> CatalogPanel:
    return request.app.state.catalog


def get_detail(request: Request) -> DetailPanel:
    return request.app.state.detail


@router.get("/state", response_model=StateResponse)
async def read_state(
    navigation: NavigationController = Depends(get_navigation),
    favorites: FavoritesStore = Depends(get_favorites),
) -> StateResponse:
    return _state_response(navigation, favorites)


@router.post("/navigation/home", response_model=StateResponse)
async def go_home(
    navigation: NavigationController = Depends(get_navigation),
    favorites: FavoritesStore = Depends(get_favorites),
) -> StateResponse:
    navigation.go_home()
    return _state_response(navigation, favorites)


@router.post("/navigation/favorites", response_model=StateResponse)
async def go_to_favorites(
    navigation: NavigationController = Depends(get_navigation),
    favorites: FavoritesStore = Depends(get_favorites),
) -> StateResponse:
    navigation.go_to_favorites()
    return _state_response(navigation, favorites)


@router.post("/navigation/movies/{movie_id}", response_model=DetailResponse)
async def select_movie(
    movie_id: int,
    navigation: NavigationController = Depends(get_navigation),
    detail: DetailPanel = Depends(get_detail),
    favorites: FavoritesStore = Depends(get_favorites),
    client: TMDbClient = Depends(get_client),
) -> DetailResponse:
    navigation.select_movie(movie_id)
    await detail.refresh()
    return _detail_response(detail, favorites, client)


@router.get("/detail", response_model=DetailResponse)
async def read_detail(
    navigation: NavigationController = Depends(get_navigation),
    detail: DetailPanel = Depends(get_detail),
    favorites: FavoritesStore = Depends(get_favorites),
    client: TMDbClient = Depends(get_client),
) -> DetailResponse:
    if navigation.state.view is not View.DETAIL:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="No movie is selected",
        )
    return _detail_response(detail, favorites, client)


@router.get("/catalog", response_model=CatalogResponse)
async def read_catalog(
    query: str = Query(default="", description="Free-text search; empty returns trending"),
    catalog: CatalogPanel = Depends(get_catalog),
    favorites: FavoritesStore = Depends(get_favorites),
    client: TMDbClient = Depends(get_client),
) -> CatalogResponse:
    result = await catalog.load(query)
    return CatalogResponse(
        query=result.query,
        loading=False,
        error=result.error,
        message=result.empty_message(),
        movies=[_movie_card(movie, favorites, client) for movie in result.movies],
    )


@router.get("/favorites", response_model=FavoritesResponse)
async def list_favorites(
    favorites: FavoritesStore = Depends(get_favorites),
    client: TMDbClient = Depends(get_client),
) -> FavoritesResponse:
    movies = favorites.movies()
    message = None
    if not movies:
        message = (
            "You haven't added any movies to your favorites yet. "
            "Go to the Home page to discover and add some!"
        )
    return FavoritesResponse(
        message=message,
        movies=[_movie_card(movie, favorites, client) for movie in movies],
    )


@router.get("/favorites/{movie_id}", response_model=FavoriteStatus)
async def read_favorite(
    movie_id: int,
    favorites: FavoritesStore = Depends(get_favorites),
) -> FavoriteStatus:
    return FavoriteStatus(
        id=movie_id,
        is_favorite=favorites.is_favorite(movie_id),
        favorites_count=len(favorites),
    )


@router.post("/favorites/toggle", response_model=FavoriteStatus)
async def toggle_favorite(
    payload: MovieIn,
    favorites: FavoritesStore = Depends(get_favorites),
) -> FavoriteStatus:
    try:
        movie = MovieSummary.from_payload(payload.model_dump())
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=str(exc),
        ) from exc
    is_favorite = favorites.toggle(movie)
    return FavoriteStatus(
        id=movie.id,
        is_favorite=is_favorite,
        favorites_count=len(favorites),
    )


def _state_response(navigation: NavigationController, favorites: FavoritesStore) -> StateResponse:
    return StateResponse(
        view=navigation.state.view,
        movie_id=navigation.state.movie_id,
        favorites_count=len(favorites),
    )


def _movie_card(movie: MovieSummary, favorites: FavoritesStore, client: TMDbClient) -> MovieCard:
    return MovieCard(
        id=movie.id,
        title=movie.title,
        poster_url=client.poster_url(movie.poster_path),
        release_date=movie.release_date,
        release_label=movie.release_label,
        vote_average=movie.vote_average,
        vote_count=movie.vote_count,
        is_favorite=favorites.is_favorite(movie.id),
    )


def _detail_response(
    detail: DetailPanel,
    favorites: FavoritesStore,
    client: TMDbClient,
) -> DetailResponse:
    movie_out = None
    if detail.movie is not None:
        movie_out = _movie_detail_out(detail.movie, favorites, client)
    return DetailResponse(
        movie_id=detail.movie_id,
        loading=detail.loading,
        error=detail.error,
        movie=movie_out,
    )


def _movie_detail_out(
    movie: MovieDetail,
    favorites: FavoritesStore,
    client: TMDbClient,
) -> MovieDetailOut:
    card = _movie_card(movie, favorites, client)
    return MovieDetailOut(
        **card.model_dump(),
        tagline=movie.tagline,
        overview=movie.overview or "No overview available.",
        runtime=movie.runtime,
        genres=[GenreOut(id=genre.id, name=genre.name) for genre in movie.genres],
        budget=movie.budget,
        revenue=movie.revenue,
        backdrop_url=client.backdrop_url(movie.backdrop_path),
        homepage=movie.homepage,
        imdb_id=movie.imdb_id,
    )


app = create_app()

"""Themes module routes."""

from fastapi import APIRouter, Depends
from fastapi.responses import Response

from markprint.modules.markdown.service import highlight_css

from .schemas import ThemesResponse
from .service import ThemeStore, get_theme_store

router = APIRouter(prefix="/api/themes", tags=["themes"])


@router.get("", response_model=ThemesResponse)
async def list_themes(store: ThemeStore = Depends(get_theme_store)) -> ThemesResponse:
    """List available themes with their metadata."""
    return ThemesResponse(themes=store.list_themes())


@router.get("/{theme_id}/stylesheet")
def get_theme_stylesheet(
    theme_id: str,
    store: ThemeStore = Depends(get_theme_store),
) -> Response:
    """
    Get the combined stylesheet (base + theme) for a theme.

    Code highlighting rules are appended so the preview matches the PDF.
    """
    css = f"{store.get_stylesheet(theme_id)}\n\n/* Code highlighting */\n{highlight_css()}"
    return Response(
        content=css,
        media_type="text/css",
        headers={"Cache-Control": "public, max-age=3600"},
    )

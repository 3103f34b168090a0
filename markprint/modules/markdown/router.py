"""Markdown module routes."""

from fastapi import APIRouter, Depends

from markprint.config import Settings, get_settings
from markprint.shared.errors import ValidationFailedError

from .schemas import RenderRequest, RenderResponse
from .service import MarkdownRenderer, get_markdown_renderer

router = APIRouter(prefix="/api/render", tags=["markdown"])


@router.post("", response_model=RenderResponse)
def render_markdown(
    request: RenderRequest,
    renderer: MarkdownRenderer = Depends(get_markdown_renderer),
    settings: Settings = Depends(get_settings),
) -> RenderResponse:
    """
    Render markdown to sanitized HTML.

    Used by the live preview, so preview and PDF share one pipeline. A plain
    def so FastAPI runs it in the threadpool.
    """
    if len(request.markdown) > settings.max_file_size:
        raise ValidationFailedError(
            f"Content exceeds maximum size of {settings.max_file_size} bytes",
            details={"markdown": ["too long"]},
        )

    return RenderResponse(html=renderer.render_sanitized(request.markdown))

"""File visualizer for pathlib.Path values.

Shows file info, lists directory contents (a row click descends into the
child path) and offers one-shot downloads of readable files. A download
click issues a token in the download store; the rendered link points to
the side-channel route, which consumes the token and streams the file.

Endpoint (under the app prefix):
    GET /file-visualizer/download?id=<token>
"""

import logging
import os
from pathlib import Path
from typing import Any, BinaryIO, Iterator, Optional
from urllib.parse import quote, urlencode

from fastapi import APIRouter, Response
from fastapi.responses import StreamingResponse
from markupsafe import Markup
from starlette.background import BackgroundTask

from replview.config import AppConfig, VisualizerOptions
from replview.downloads import DownloadStore, FileResource, get_download_store
from replview.ui import html
from replview.ui.context import RenderContext
from replview.ui.table import Column, TableData, render_table
from replview.visualizers.base import SPECIFIC, Visualizer

logger = logging.getLogger(__name__)

DOWNLOAD_PATH = "/file-visualizer/download"

_FILE = html.template("""\
<div class="file">
  <p>File info</p>
  <div><b>Name: </b>{{ name }}</div>
  {% if is_file %}
  <div><b>Size: </b>{{ size|size }}</div>
  {% elif listing %}
  {{ listing }}
  {% endif %}
  {% if download_action %}
  <a class="btn" href="{{ download_action }}">Download</a>
  {% endif %}
  {% if download_url %}
  <div><a target="_blank" href="{{ download_url }}">Download here</a></div>
  {% endif %}
</div>
""")


def _iter_file(handle: BinaryIO, chunk_size: int) -> Iterator[bytes]:
    with handle:
        while True:
            chunk = handle.read(chunk_size)
            if not chunk:
                break
            yield chunk


def content_disposition(name: str) -> str:
    """Attachment header value; non-ASCII names go in filename* (RFC 6266)."""
    quoted = quote(name)
    if quoted == name:
        return f"attachment; filename={name}"
    fallback = "".join(
        c if c.isascii() and c.isprintable() and c not in '"\\' else "_" for c in name
    )
    return f"attachment; filename=\"{fallback}\"; filename*=UTF-8''{quoted}"


def _size_text(path: Path) -> str:
    if path.is_dir():
        return "[DIR]"
    try:
        return html.format_size(path.stat().st_size)
    except OSError:
        return "?"


def _listing(directory: Path) -> TableData:
    children = sorted(directory.iterdir(), key=lambda p: p.name)
    return TableData(
        columns=[
            Column("Name", lambda p: p.name),
            Column("Size", _size_text),
        ],
        rows=children,
        row_target=lambda _position, child: (child.name, child),
    )


class FileVisualizer(Visualizer):
    def __init__(
        self,
        downloads: DownloadStore,
        allow_download: bool = True,
        chunk_size: int = 64 * 1024,
    ):
        self.downloads = downloads
        self.allow_download = allow_download
        self.chunk_size = chunk_size
        self._router = self._build_router()

    @property
    def label(self) -> str:
        return "File"

    def supports(self, value: Any) -> bool:
        return isinstance(value, Path)

    def precedence(self) -> int:
        return SPECIFIC

    def render(self, value: Any, ctx: RenderContext) -> Markup:
        is_file = value.is_file()
        listing = None
        if value.is_dir():
            listing = render_table(_listing(value), ctx)

        download_action = None
        download_url = None
        if is_file and self.allow_download and os.access(value, os.R_OK):
            resource = FileResource.for_path(value)
            token = self.downloads.token_for(resource)
            if token is None:
                downloads = self.downloads
                download_action = ctx.action_url(lambda: downloads.issue(resource))
            else:
                download_url = ctx.url(DOWNLOAD_PATH) + "?" + urlencode({"id": token})

        return html.render(
            _FILE,
            name=value.name or str(value),
            is_file=is_file,
            size=value.stat().st_size if is_file else 0,
            listing=listing,
            download_action=download_action,
            download_url=download_url,
        )

    def side_channel_handler(self) -> Optional[APIRouter]:
        return self._router

    def _build_router(self) -> APIRouter:
        router = APIRouter(tags=["file-visualizer"])

        @router.get(DOWNLOAD_PATH)
        def download_file(id: Optional[str] = None):
            """Stream a file for a download token. The token is consumed first."""
            resource = self.downloads.resolve(id) if id else None
            if not isinstance(resource, FileResource):
                return Response(status_code=404)

            try:
                handle = open(resource.path, "rb")
            except OSError as e:
                logger.warning(f"Download of {resource.path} failed: {e}")
                return Response(status_code=404)

            logger.info(f"Streaming download of {resource.path}")
            return StreamingResponse(
                _iter_file(handle, self.chunk_size),
                media_type="application/octet-stream",
                headers={"Content-Disposition": content_disposition(resource.name)},
                background=BackgroundTask(handle.close),
            )

        return router


def file_visualizer(config: AppConfig, options: VisualizerOptions) -> Optional[FileVisualizer]:
    if not options.enabled:
        return None
    return FileVisualizer(
        downloads=get_download_store(),
        allow_download=options.option("allow_download", True),
        chunk_size=config.download_chunk_size,
    )

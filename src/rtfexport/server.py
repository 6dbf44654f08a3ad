"""FastAPI web service for HTML/Markdown to RTF conversion.

Endpoints::

    POST /convert       Upload a .md/.html file and receive .rtf or .hwpx back.
    POST /convert/text  Send raw Markdown text, receive RTF or HWPX bytes.
    POST /convert/html  Send an HTML snapshot, receive RTF or HWPX bytes.
    GET  /health        Health check.
    GET  /styles        List available style presets.

Run::

    uvicorn rtfexport.server:app --host 0.0.0.0 --port 8000
"""

from __future__ import annotations

import logging
from pathlib import Path
from urllib.parse import quote

from fastapi import FastAPI, File, Form, Request, UploadFile
from fastapi.responses import JSONResponse, Response

from rtfexport import __version__
from rtfexport.converter import FORMATS, HTML_SUFFIXES, Converter
from rtfexport.errors import InvalidInputError, RtfExportError
from rtfexport.style_manager import StyleManager

logger = logging.getLogger(__name__)

app = FastAPI(
    title="rtfexport",
    description="HTML / Markdown to RTF conversion service",
    version=__version__,
)

MEDIA_TYPES = {
    "rtf": "application/rtf",
    "hwpx": "application/hwpx+zip",
}


def _content_disposition(filename: str) -> str:
    """Build Content-Disposition header, RFC 5987 for non-ASCII names."""
    try:
        filename.encode("ascii")
        return f'attachment; filename="{filename}"'
    except UnicodeEncodeError:
        encoded = quote(filename)
        return f"attachment; filename*=UTF-8''{encoded}"


def _error(status_code: int, exc: RtfExportError) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=exc.to_dict())


@app.exception_handler(RtfExportError)
async def _handle_export_error(_request: Request, exc: RtfExportError) -> JSONResponse:
    logger.info("conversion rejected: %s (%s)", exc.message, exc.detail)
    return _error(422, exc)


def _respond(data: bytes, fmt: str, filename: str) -> Response:
    return Response(
        content=data,
        media_type=MEDIA_TYPES[fmt],
        headers={"Content-Disposition": _content_disposition(filename)},
    )


def _converter(style: str) -> Converter:
    if style not in StyleManager.PRESETS:
        raise InvalidInputError(detail=f"unknown style {style!r}")
    return Converter(style_preset=style)


def _check_format(fmt: str) -> None:
    if fmt not in FORMATS:
        raise InvalidInputError(detail=f"unknown format {fmt!r}")


@app.get("/health")
async def health() -> dict[str, str]:
    """Health check endpoint."""
    return {"status": "ok", "version": __version__}


@app.get("/styles")
async def list_styles() -> dict[str, list[str]]:
    """List available style presets."""
    return {"presets": StyleManager.PRESETS}


@app.post("/convert")
async def convert_file(
    file: UploadFile = File(...),
    style: str = Form("default"),
    format: str = Form("rtf"),
    encoding: str = Form("utf-8"),
) -> Response:
    """Upload a Markdown or HTML file and receive the converted file back.

    - **file**: source file (.md, .html)
    - **style**: Style preset name (default, letter, compact)
    - **format**: ``rtf`` or ``hwpx``
    - **encoding**: Source file encoding
    """
    _check_format(format)
    raw = await file.read()
    try:
        text = raw.decode(encoding)
    except (UnicodeDecodeError, LookupError) as exc:
        raise InvalidInputError(detail=str(exc)) from exc

    source_name = file.filename or "document.md"
    is_html = Path(source_name).suffix.lower() in HTML_SUFFIXES
    data = _converter(style).convert_bytes(text, is_html=is_html, fmt=format)

    filename = source_name.rsplit(".", 1)[0] + f".{format}"
    return _respond(data, format, filename)


@app.post("/convert/text")
async def convert_text(
    markdown: str = Form(...),
    style: str = Form("default"),
    format: str = Form("rtf"),
) -> Response:
    """Send raw Markdown text and receive RTF (or HWPX) bytes."""
    _check_format(format)
    data = _converter(style).convert_bytes(markdown, fmt=format)
    return _respond(data, format, f"document.{format}")


@app.post("/convert/html")
async def convert_html(
    html: str = Form(...),
    style: str = Form("default"),
    format: str = Form("rtf"),
) -> Response:
    """Send an editor HTML snapshot and receive RTF (or HWPX) bytes."""
    _check_format(format)
    data = _converter(style).convert_bytes(html, is_html=True, fmt=format)
    return _respond(data, format, f"document.{format}")

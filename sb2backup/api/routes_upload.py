from __future__ import annotations

import logging
import tempfile
from pathlib import Path, PurePosixPath
from typing import IO
from urllib.parse import quote

from fastapi import APIRouter, Request, Response
from fastapi.responses import PlainTextResponse
from starlette.concurrency import run_in_threadpool
from starlette.datastructures import FormData, UploadFile
from starlette.exceptions import HTTPException
from starlette.formparsers import MultiPartException

from sb2backup.core.config import Settings
from sb2backup.core.errors import (
    ConversionError,
    CopyError,
    EncodeError,
    FileRetrievalError,
    MultipartParseError,
    TempFileError,
    UploadError,
    UploadTooLargeError,
)
from sb2backup.services.converter import backup_name_for, convert_file

logger = logging.getLogger(__name__)

router = APIRouter()

UPLOAD_FIELD = "db3File"
COPY_CHUNK_SIZE = 1024 * 1024

UPLOAD_ERROR_STATUS: dict[type[UploadError], int] = {
    MultipartParseError: 400,
    FileRetrievalError: 400,
    UploadTooLargeError: 413,
    TempFileError: 500,
    CopyError: 500,
}


def error_status_for(exc: Exception) -> int:
    if isinstance(exc, UploadError):
        return UPLOAD_ERROR_STATUS.get(type(exc), 400)
    if isinstance(exc, EncodeError):
        return 500
    return 422


def _error_response(settings: Settings, message: str, status_code: int) -> PlainTextResponse:
    if settings.legacy_error_status:
        status_code = 200
    return PlainTextResponse(message, status_code=status_code)


def _client_filename(upload: UploadFile) -> str:
    # browsers on Windows may send the full local path
    name = PurePosixPath((upload.filename or "").replace("\\", "/")).name
    return name or "upload.db3"


def attachment_header(filename: str) -> str:
    ascii_name = "".join(ch if 32 <= ord(ch) < 127 else "_" for ch in filename)
    escaped = ascii_name.replace("\\", "\\\\").replace('"', '\\"')
    header = f'attachment; filename="{escaped}"'
    if ascii_name != filename:
        header += f"; filename*=UTF-8''{quote(filename, safe='')}"
    return header


async def _read_form(request: Request) -> FormData:
    content_type = request.headers.get("content-type", "")
    if not content_type.startswith("multipart/form-data"):
        raise MultipartParseError(
            f"Not a multipart form, unexpected Content-Type '{content_type or 'none'}'"
        )
    try:
        return await request.form()
    except (HTTPException, MultiPartException) as exc:
        detail = getattr(exc, "detail", None) or getattr(exc, "message", None) or exc
        raise MultipartParseError(f"Not a multipart form, {detail}") from exc


def _get_upload(form: FormData) -> UploadFile:
    upload = form.get(UPLOAD_FIELD)
    if not isinstance(upload, UploadFile):
        raise FileRetrievalError(f"Error Retrieving the File, no file in field '{UPLOAD_FIELD}'")
    return upload


def _create_temp_file(tmp_dir: Path) -> IO[bytes]:
    try:
        return tempfile.NamedTemporaryFile(
            dir=tmp_dir, prefix="upload-", suffix=".db3", delete=False
        )
    except OSError as exc:
        raise TempFileError(f"Cannot create tmp file, {exc}") from exc


async def _copy_upload(upload: UploadFile, target: IO[bytes], max_bytes: int) -> int:
    copied = 0
    try:
        while chunk := await upload.read(COPY_CHUNK_SIZE):
            copied += len(chunk)
            if copied > max_bytes:
                raise UploadTooLargeError(
                    f"Uploaded file is larger than the {max_bytes} byte limit"
                )
            target.write(chunk)
        target.flush()
    except OSError as exc:
        raise CopyError(f"Error saving tmp file, {exc}") from exc
    return copied


@router.post("/upload.html")
async def upload_db3(request: Request) -> Response:
    settings: Settings = request.app.state.settings
    form: FormData | None = None
    temp_path: Path | None = None
    try:
        form = await _read_form(request)
        upload = _get_upload(form)
        filename = _client_filename(upload)
        logger.info("Uploaded file: '%s', size: %s", filename, upload.size)

        # sqlite cannot open an in-memory buffer, so the upload has to touch the disk
        temp_file = _create_temp_file(settings.tmp_dir)
        temp_path = Path(temp_file.name)
        with temp_file:
            await _copy_upload(upload, temp_file, settings.max_upload_bytes)

        conversion = await run_in_threadpool(convert_file, temp_path, False)
    except UploadError as exc:
        logger.warning("    Upload failed: %s", exc)
        return _error_response(settings, str(exc), error_status_for(exc))
    except ConversionError as exc:
        logger.warning("    Error converting file, %s", exc)
        return _error_response(
            settings, f"Error converting file, {exc}", error_status_for(exc)
        )
    finally:
        if temp_path is not None:
            temp_path.unlink(missing_ok=True)
        if form is not None:
            await form.close()

    logger.info(
        "    Converted file, size: %d, #commands: %d, cloud sync: %s",
        len(conversion.payload),
        conversion.command_count,
        "yes" if conversion.document.cypher is not None else "no",
    )
    return Response(
        content=conversion.payload,
        media_type="application/octet-stream",
        headers={"Content-Disposition": attachment_header(backup_name_for(filename))},
    )

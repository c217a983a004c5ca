"""
Batch conversion endpoint.

Uploads are validated and spooled to the upload directory here, before
the core sees them; the batch itself runs in the threadpool so other
requests keep being served while images are encoded.
"""
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Header, UploadFile
from fastapi.concurrency import run_in_threadpool

from webpress.config import Settings, get_settings
from webpress.core.aggregator import aggregate
from webpress.core.batch import process_batch
from webpress.core.session import SessionStore
from webpress.core.transcoder import AdaptiveTranscoder
from webpress.dependencies import get_session_store, get_transcoder
from webpress.exceptions import ValidationError
from webpress.models.outcome import SourceFile
from webpress.models.responses import ConvertResponse, ErrorResponse
from webpress.utils.file_handling import ensure_dir, get_temp_filepath, safe_remove

# Set up logging
logger = logging.getLogger(__name__)

# Create router
router = APIRouter(tags=["Conversion"])

UPLOAD_CHUNK_SIZE = 1024 * 1024


def _discard(sources: List[SourceFile]) -> None:
    for source in sources:
        safe_remove(source.temp_path)


async def spool_upload(upload: UploadFile, settings: Settings) -> SourceFile:
    """
    Validate one upload and copy it to the upload directory.

    Raises:
        ValidationError: If the media type is not allowed or the file is too large
    """
    media_type = (upload.content_type or "").lower()
    if media_type not in settings.allowed_types:
        raise ValidationError(
            "Invalid file type. Only JPEG, PNG, WebP, and GIF are allowed.",
            {"filename": upload.filename, "media_type": media_type}
        )

    ensure_dir(settings.upload_dir)
    temp_path = get_temp_filepath(settings.upload_dir)
    size = 0
    try:
        with open(temp_path, "wb") as out:
            while True:
                chunk = await upload.read(UPLOAD_CHUNK_SIZE)
                if not chunk:
                    break
                size += len(chunk)
                if size > settings.max_file_size:
                    raise ValidationError(
                        f"File {upload.filename} exceeds the maximum size of {settings.max_file_size} bytes",
                        {"filename": upload.filename}
                    )
                out.write(chunk)
    except Exception:
        safe_remove(temp_path)
        raise

    return SourceFile(
        original_name=upload.filename or "",
        temp_path=temp_path,
        size=size,
        media_type=media_type
    )


@router.post(
    "/convert",
    response_model=ConvertResponse,
    response_model_exclude_none=True,
    responses={400: {"model": ErrorResponse}}
)
async def convert_images(
    image: Optional[List[UploadFile]] = File(None),
    x_session_id: Optional[str] = Header(None),
    settings: Settings = Depends(get_settings),
    store: SessionStore = Depends(get_session_store),
    transcoder: AdaptiveTranscoder = Depends(get_transcoder)
):
    """
    Convert a batch of images to WebP.

    - **image**: One or more JPEG, PNG, WebP or GIF files
    - **x-session-id**: Optional session to add the outputs to

    Returns:
        Download URLs and size reports aligned with the upload order, plus
        an archive URL when at least one file was converted
    """
    uploads = image or []
    if not uploads:
        logger.warning("No files uploaded")
        raise ValidationError("No files uploaded")
    if len(uploads) > settings.max_files:
        raise ValidationError(f"Too many files. At most {settings.max_files} files are allowed per request.")

    logger.info(f"Files received: {[(u.filename, u.content_type) for u in uploads]}")

    sources = []
    try:
        for upload in uploads:
            sources.append(await spool_upload(upload, settings))
        session = store.resolve(x_session_id)
    except Exception:
        _discard(sources)
        raise

    outcomes = await run_in_threadpool(process_batch, session, sources, transcoder)
    response = aggregate(session, outcomes)

    logger.info(
        f"Session {session.session_id}: {sum(o.converted for o in outcomes)} of "
        f"{len(outcomes)} files converted"
    )
    return response

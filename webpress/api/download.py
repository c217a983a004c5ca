"""
Download endpoints for converted files and session archives.
"""
import logging

from fastapi import APIRouter, Depends
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import FileResponse, StreamingResponse
from starlette.background import BackgroundTask

from webpress.config import Settings, get_settings
from webpress.core.archive import ARCHIVE_FILENAME, ARCHIVE_MEDIA_TYPE, build_archive
from webpress.core.session import SessionStore
from webpress.core.transcoder import TARGET_MEDIA_TYPE
from webpress.dependencies import get_session_store
from webpress.models.responses import ErrorResponse

# Set up logging
logger = logging.getLogger(__name__)

# Create router
router = APIRouter(tags=["Downloads"])


@router.get(
    "/download/{session_id}/{filename}",
    response_class=FileResponse,
    responses={404: {"model": ErrorResponse}}
)
async def download_file(session_id: str, filename: str, store: SessionStore = Depends(get_session_store)):
    """
    Download one converted file of a session.

    - **session_id**: Session the file was converted in
    - **filename**: Name of the converted file
    """
    path = store.locate_file(session_id, filename)
    logger.info(f"Download requested: {path}")
    return FileResponse(path, media_type=TARGET_MEDIA_TYPE, filename=filename)


@router.get(
    "/download-zip/{session_id}",
    responses={404: {"model": ErrorResponse}, 500: {"model": ErrorResponse}}
)
async def download_archive(
    session_id: str,
    settings: Settings = Depends(get_settings),
    store: SessionStore = Depends(get_session_store)
):
    """
    Download every converted file of a session as one ZIP archive.

    The archive is built for this request only and deleted once it has
    been sent, or when sending fails.
    """
    session_dir = store.session_dir(session_id)
    job = await run_in_threadpool(build_archive, session_dir, settings.archive_dir, session_id)

    return StreamingResponse(
        job.iter_bytes(),
        media_type=ARCHIVE_MEDIA_TYPE,
        headers={
            "Content-Disposition": f'attachment; filename="{ARCHIVE_FILENAME}"',
            "Content-Length": str(job.size)
        },
        background=BackgroundTask(job.cleanup)
    )

"""
On-demand ZIP archives of a session directory.

Each request builds its own archive under a unique name in the archive
directory, streams it, and deletes it afterwards. Entries are written
one file at a time, so the archive is never held in memory.
"""
import os
import logging
import zipfile
from pathlib import Path
from typing import Iterator, List, Union

from webpress.core.batch import PARTIAL_SUFFIX
from webpress.exceptions import ArchiveError, NoFilesAvailableError
from webpress.utils.file_handling import ensure_dir, get_unique_filepath, safe_remove

# Set up logging
logger = logging.getLogger(__name__)

ARCHIVE_FILENAME = "converted_images.zip"
ARCHIVE_MEDIA_TYPE = "application/zip"
ARCHIVE_COMPRESSLEVEL = 9
STREAM_CHUNK_SIZE = 64 * 1024


class ArchiveJob:
    """
    A built archive waiting to be delivered.

    ``iter_bytes`` streams the archive and deletes it when iteration ends;
    ``cleanup`` deletes it directly and may be called any number of times.
    """

    def __init__(self, session_id: str, path: str, entries: List[str]):
        self.session_id = session_id
        self.path = path
        self.entries = entries
        self.size = os.path.getsize(path)
        self._cleaned = False

    def iter_bytes(self, chunk_size: int = STREAM_CHUNK_SIZE) -> Iterator[bytes]:
        try:
            with open(self.path, "rb") as f:
                while True:
                    chunk = f.read(chunk_size)
                    if not chunk:
                        break
                    yield chunk
        finally:
            self.cleanup()

    def cleanup(self) -> None:
        if self._cleaned:
            return
        self._cleaned = True
        if safe_remove(self.path):
            logger.info(f"Deleted archive {self.path}")


def list_session_files(session_dir: Union[str, Path]) -> List[Path]:
    """Regular files in ``session_dir``, sorted by name, skipping conversions in progress."""
    session_dir = Path(session_dir)
    if not session_dir.is_dir():
        return []
    return sorted(p for p in session_dir.iterdir() if p.is_file() and p.suffix != PARTIAL_SUFFIX)


def build_archive(
    session_dir: Union[str, Path],
    archive_dir: Union[str, Path],
    session_id: str
) -> ArchiveJob:
    """
    Compress every file of a session into a new ZIP archive.

    Args:
        session_dir: Directory holding the session's converted files
        archive_dir: Directory for the transient archive
        session_id: Session identifier, used in the archive name and logs

    Returns:
        ArchiveJob for the written archive

    Raises:
        NoFilesAvailableError: If the session directory is absent or empty
        ArchiveError: If writing the archive fails
    """
    files = list_session_files(session_dir)
    if not files:
        logger.warning(f"No files found in {session_dir}")
        raise NoFilesAvailableError(session_id)

    logger.info(f"Zipping directory: {session_dir}")
    archive_path = None
    try:
        ensure_dir(archive_dir)
        archive_path = get_unique_filepath(archive_dir, prefix=f"{session_id}_", suffix=".zip")
        with zipfile.ZipFile(
            archive_path, "w",
            compression=zipfile.ZIP_DEFLATED,
            compresslevel=ARCHIVE_COMPRESSLEVEL
        ) as zip_file:
            for path in files:
                zip_file.write(path, arcname=path.name)
        job = ArchiveJob(session_id, archive_path, [p.name for p in files])
    except Exception as e:
        logger.error(f"ZIP creation error for session {session_id}: {e}")
        if archive_path is not None:
            safe_remove(archive_path)
        raise ArchiveError("Failed to create ZIP", {"session_id": session_id}) from e

    logger.info(f"ZIP created: {archive_path}, size: {job.size} bytes")
    return job

"""
Session storage.

A session is a directory under the output root that holds the converted
files of one or more batches. Session identifiers end up as path
components, so a client-supplied identifier is only reused when it is
made of safe characters; anything else gets a freshly minted identifier.
"""
import re
import time
import uuid
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Collection, Optional, Union
from urllib.parse import quote

from webpress.core.transcoder import TARGET_EXTENSION
from webpress.exceptions import NotFoundError
from webpress.utils.file_handling import ensure_dir

logger = logging.getLogger(__name__)

SESSION_ID_PATTERN = re.compile(r"^[A-Za-z0-9_-]{1,64}$")
DEFAULT_STEM = "image"


def new_session_id() -> str:
    """Mint an opaque session identifier."""
    return f"session_{int(time.time() * 1000)}_{uuid.uuid4().hex[:8]}"


def is_safe_session_id(session_id: Optional[str]) -> bool:
    return bool(session_id) and SESSION_ID_PATTERN.match(session_id) is not None


def is_safe_filename(filename: Optional[str]) -> bool:
    """A single path component: no separators, no NUL, not '.' or '..'."""
    if not filename or filename in (".", ".."):
        return False
    return not any(c in filename for c in ("/", "\\", "\0"))


def output_name(original_name: Optional[str]) -> str:
    """
    Derive the output filename for an upload.

    The directory part (either separator style) and the extension are
    dropped and the WebP extension is appended: ``photos/cat.jpg`` becomes
    ``cat.webp``.
    """
    base = (original_name or "").replace("\\", "/").rsplit("/", 1)[-1]
    stem = base.rsplit(".", 1)[0] if "." in base[1:] else base
    stem = stem.strip()
    if not stem or stem in (".", ".."):
        stem = DEFAULT_STEM
    return f"{stem}{TARGET_EXTENSION}"


def unique_output_name(original_name: Optional[str], taken: Collection[str]) -> str:
    """
    Derive an output filename that is not in ``taken``.

    A clashing name gets a counter before the extension: the second
    ``a.png`` or ``a.jpg`` of a batch becomes ``a-1.webp``.
    """
    name = output_name(original_name)
    stem = name[:-len(TARGET_EXTENSION)]
    counter = 1
    while name in taken:
        name = f"{stem}-{counter}{TARGET_EXTENSION}"
        counter += 1
    return name


@dataclass(frozen=True)
class Session:
    """A session and the directory its outputs are written to"""
    session_id: str
    directory: Path
    created_at: datetime

    def output_path(self, filename: str) -> Path:
        return self.directory / filename

    def download_path(self, filename: str) -> str:
        return f"/download/{self.session_id}/{quote(filename)}"

    @property
    def archive_path(self) -> str:
        return f"/download-zip/{self.session_id}"


class SessionStore:
    """Resolves sessions and the files inside them under one output root."""

    def __init__(self, root: Union[str, Path]):
        self.root = Path(root)

    def resolve(self, client_session_id: Optional[str] = None) -> Session:
        """
        Return the session for a batch, creating its directory if needed.

        Args:
            client_session_id: Identifier sent by the client, if any

        Returns:
            The reused session when the identifier is safe, otherwise a new one
        """
        if is_safe_session_id(client_session_id):
            session_id = client_session_id
        else:
            if client_session_id:
                logger.warning(f"Ignoring unsafe session id {client_session_id!r}")
            session_id = new_session_id()

        directory = self.root / session_id
        if ensure_dir(directory):
            logger.info(f"Created session {session_id}")
        else:
            logger.info(f"Reusing session {session_id}")
        return Session(session_id=session_id, directory=directory, created_at=datetime.now(timezone.utc))

    def session_dir(self, session_id: str) -> Path:
        """
        Map a session identifier to its directory without touching the disk.

        Raises:
            NotFoundError: If the identifier is not a safe path component
        """
        if not is_safe_session_id(session_id):
            raise NotFoundError("Session not found", {"session_id": session_id})
        return self.root / session_id

    def locate_file(self, session_id: str, filename: str) -> Path:
        """
        Find a converted file of a session.

        Raises:
            NotFoundError: If the session or file does not exist
        """
        if not is_safe_filename(filename):
            raise NotFoundError("File not found", {"filename": filename})
        path = self.session_dir(session_id) / filename
        if not path.is_file():
            logger.warning(f"File not found: {path}")
            raise NotFoundError("File not found", {"session_id": session_id, "filename": filename})
        return path

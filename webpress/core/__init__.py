"""
Core conversion logic for the webpress service.

This package contains:
- transcoder: the adaptive WebP quality search
- session: session directories and output naming
- batch: per-file processing of an upload batch
- aggregator: the batch response built from per-file outcomes
- archive: on-demand ZIP archives of a session
"""
from webpress.core.transcoder import (
    TARGET_EXTENSION,
    TARGET_MEDIA_TYPE,
    MIN_OUTPUT_SIZE,
    AdaptiveTranscoder,
    SearchResult,
    SearchState,
    encode_webp,
    load_image,
    transcode
)

from webpress.core.session import (
    Session,
    SessionStore,
    output_name,
    unique_output_name
)

from webpress.core.batch import (
    process_file,
    process_batch
)

from webpress.core.aggregator import (
    aggregate,
    archive_available,
    download_urls
)

from webpress.core.archive import (
    ARCHIVE_FILENAME,
    ArchiveJob,
    build_archive
)

__all__ = [
    # Transcoding
    'TARGET_EXTENSION',
    'TARGET_MEDIA_TYPE',
    'MIN_OUTPUT_SIZE',
    'AdaptiveTranscoder',
    'SearchResult',
    'SearchState',
    'encode_webp',
    'load_image',
    'transcode',

    # Sessions
    'Session',
    'SessionStore',
    'output_name',
    'unique_output_name',

    # Batches
    'process_file',
    'process_batch',
    'aggregate',
    'archive_available',
    'download_urls',

    # Archives
    'ARCHIVE_FILENAME',
    'ArchiveJob',
    'build_archive'
]

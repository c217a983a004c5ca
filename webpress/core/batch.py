"""
Batch processing: one conversion outcome per uploaded file.

Files are converted one after the other. Each file produces exactly one
``ConversionOutcome``; an error while converting one file is recorded in
its outcome and never stops the rest of the batch. The spooled upload is
deleted once its file has been processed, whatever the outcome.

The quality search writes to a transient ``.part`` file in the session
directory. Only a converted file is moved onto its output name, so a
skipped or failed file never touches an output kept earlier.
"""
import os
import logging
from typing import List, Optional, Sequence

from webpress.core.session import Session, output_name, unique_output_name
from webpress.core.transcoder import AdaptiveTranscoder, TARGET_MEDIA_TYPE
from webpress.exceptions import WebpressError
from webpress.models.outcome import ConversionOutcome, OutcomeStatus, SourceFile
from webpress.utils.file_handling import get_unique_filepath, safe_remove
from webpress.utils.metrics import measure_size_reduction

logger = logging.getLogger(__name__)

GENERIC_FILE_ERROR = "Internal error while processing file"
PARTIAL_SUFFIX = ".part"


def process_file(
    session: Session,
    source: SourceFile,
    transcoder: AdaptiveTranscoder,
    filename: Optional[str] = None
) -> ConversionOutcome:
    """
    Convert one spooled upload into the session directory.

    Args:
        session: Session receiving the output
        source: The spooled upload
        transcoder: Transcoder running the quality search
        filename: Output name, derived from the upload name if not given

    Returns:
        converted, skipped or failed outcome for ``source``
    """
    if filename is None:
        filename = output_name(source.original_name)
    target_path = str(session.output_path(filename))
    work_path = get_unique_filepath(session.directory, suffix=PARTIAL_SUFFIX)
    original_size = source.size
    logger.info(f"Processing {source.original_name} to {target_path}")

    try:
        original_size = os.path.getsize(source.temp_path)
        result = transcoder.run(
            source.temp_path,
            work_path,
            original_size,
            source.media_type == TARGET_MEDIA_TYPE
        )

        if result.converted_size >= original_size:
            logger.info(
                f"Final size {result.converted_size} >= {original_size}, "
                f"skipping conversion of {source.original_name}"
            )
            safe_remove(work_path)
            return ConversionOutcome(
                original_name=source.original_name,
                original_size=original_size,
                converted_size=original_size,
                status=OutcomeStatus.SKIPPED
            )

        os.replace(work_path, target_path)
        reduction = measure_size_reduction(original_size, result.converted_size)
        logger.info(
            f"Converted {source.original_name}: {original_size} -> {result.converted_size} bytes "
            f"at quality {result.quality} ({reduction['space_savings_percent']}% saved)"
        )
        return ConversionOutcome(
            original_name=source.original_name,
            original_size=original_size,
            converted_size=result.converted_size,
            status=OutcomeStatus.CONVERTED,
            download_path=session.download_path(filename)
        )
    except WebpressError as e:
        logger.error(f"Error processing {source.original_name}: {e.message}")
        detail = e.message
    except Exception:
        logger.exception(f"Unexpected error processing {source.original_name}")
        detail = GENERIC_FILE_ERROR
    finally:
        if not safe_remove(source.temp_path):
            logger.warning(f"Upload {source.temp_path} was not removed")

    safe_remove(work_path)
    return ConversionOutcome(
        original_name=source.original_name,
        original_size=original_size,
        converted_size=original_size,
        status=OutcomeStatus.FAILED,
        error_detail=detail
    )


def process_batch(
    session: Session,
    sources: Sequence[SourceFile],
    transcoder: Optional[AdaptiveTranscoder] = None
) -> List[ConversionOutcome]:
    """
    Convert every file of a batch, in order.

    Files converted earlier in the batch keep their names; a later upload
    with the same stem is written under a numbered name instead.

    Returns:
        One outcome per source file, in input order
    """
    if transcoder is None:
        transcoder = AdaptiveTranscoder()

    outcomes = []
    written = set()
    for source in sources:
        filename = unique_output_name(source.original_name, written)
        outcome = process_file(session, source, transcoder, filename)
        if outcome.converted:
            written.add(filename)
        outcomes.append(outcome)
    return outcomes

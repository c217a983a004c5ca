"""
Turns the ordered outcomes of a batch into the conversion response.
"""
from typing import List, Sequence

from webpress.core.session import Session
from webpress.models.outcome import ConversionOutcome, OutcomeStatus
from webpress.models.responses import ConvertResponse, FileSizeEntry


def download_urls(outcomes: Sequence[ConversionOutcome]) -> List[str]:
    """One URL per outcome; empty unless the file was converted."""
    return [(o.download_path or "") if o.converted else "" for o in outcomes]


def archive_available(outcomes: Sequence[ConversionOutcome]) -> bool:
    """An archive is offered as soon as one file was converted."""
    return any(o.converted for o in outcomes)


def file_size_entry(outcome: ConversionOutcome) -> FileSizeEntry:
    entry = FileSizeEntry(
        original_name=outcome.original_name,
        original_size=outcome.original_size,
        converted_size=outcome.converted_size
    )
    if outcome.status is OutcomeStatus.SKIPPED:
        entry.skipped = True
    elif outcome.status is OutcomeStatus.FAILED:
        entry.error = True
        entry.error_detail = outcome.error_detail
    return entry


def aggregate(session: Session, outcomes: Sequence[ConversionOutcome]) -> ConvertResponse:
    """
    Build the batch response.

    Args:
        session: Session the batch was written to
        outcomes: Outcomes in input order

    Returns:
        ConvertResponse with arrays aligned to the input order
    """
    return ConvertResponse(
        session_id=session.session_id,
        download_urls=download_urls(outcomes),
        zip_download_url=session.archive_path if archive_available(outcomes) else "",
        file_sizes=[file_size_entry(o) for o in outcomes]
    )

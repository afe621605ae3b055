"""
SFTP -> S3 poll-and-transfer run.

One run opens a single SFTP session, lists the incoming directory, and for
each CSV file downloads it into memory, uploads it to S3 under a unique key,
and moves it to the processing directory. A failure on one file becomes an
error outcome for that file; the rest of the batch still runs. Connection and
listing failures abort the run with ``TransportError``.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone

from sftp_poller.config.settings import ConnectionParameters
from sftp_poller.connections.sftp import SFTPConnection
from sftp_poller.exceptions import FileProcessingError, PollerError, TransportError
from sftp_poller.models import DownloadedPayload, FileOutcome, RemoteFileEntry, Stage
from sftp_poller.sync.types import ObjectUploader, RemoteSession
from sftp_poller.utils.logging import get_logger

logger = get_logger("sftp_poller.sync.sftp_poll")

INCOMING_DIR = "/referwell/incoming"
PROCESSING_DIR = "/referwell/processing"

STORAGE_KEY_PREFIX = "sftp-appointments/"
CSV_CONTENT_TYPE = "text/csv"
CSV_SUFFIX = ".csv"


def poll_sftp_server(
    params: ConnectionParameters,
    remote_path: str = "/",
    *,
    uploader: ObjectUploader,
    session: RemoteSession | None = None,
) -> list[FileOutcome]:
    """
    Run one polling batch.

    Args:
        params: SFTP connection parameters
        remote_path: Base path holding the incoming/processing directories
        uploader: Upload target (an ``S3Connection`` in production)
        session: Remote session (default: a new ``SFTPConnection``)

    Returns:
        One outcome per candidate file, in listing order

    Raises:
        TransportError: If the session cannot be opened or the incoming
            directory cannot be listed. The session is closed first.
    """
    if session is None:
        session = SFTPConnection(params)

    outcomes: list[FileOutcome] = []
    try:
        _connect(session, params)

        incoming, processing = remote_directories(remote_path)
        logger.info(f"Connected to SFTP server, listing files in: {incoming}")

        entries = _list(session, params, incoming)
        logger.info(f"Found {len(entries)} files in remote directory")

        candidates = [entry for entry in entries if is_candidate(entry)]
        logger.info(f"Processing {len(candidates)} CSV files")

        for entry in candidates:
            outcomes.append(process_file(session, uploader, entry.name, incoming, processing))
    except PollerError as e:
        logger.error(f"SFTP connection or operation failed: {e}")
        raise
    finally:
        _close(session)

    return outcomes


def remote_directories(remote_path: str) -> tuple[str, str]:
    """Incoming and processing directories under ``remote_path``."""
    base = (remote_path or "/").rstrip("/")
    return f"{base}{INCOMING_DIR}", f"{base}{PROCESSING_DIR}"


def is_candidate(entry: RemoteFileEntry) -> bool:
    """Regular files ending in .csv (any case)."""
    return entry.is_regular_file and entry.name.lower().endswith(CSV_SUFFIX)


def build_storage_key(filename: str) -> str:
    """Fresh, collision-free S3 key for ``filename``."""
    return f"{STORAGE_KEY_PREFIX}{uuid.uuid4()}-{filename}"


def process_file(
    session: RemoteSession,
    uploader: ObjectUploader,
    filename: str,
    incoming: str,
    processing: str,
) -> FileOutcome:
    """
    Download, upload and relocate one file.

    Never raises: every failure becomes an error outcome.
    """
    source = f"{incoming}/{filename}"
    logger.info(f"Processing file: {filename}")

    try:
        payload = _download(session, source, filename)
        storage_key = build_storage_key(filename)
        _upload(uploader, storage_key, payload)
        _relocate(session, source, f"{processing}/{filename}", filename, storage_key)
    except FileProcessingError as e:
        logger.error(f"Error processing file {filename} ({e.stage}): {e.message}")
        return FileOutcome.failed(filename, e.message, stage=Stage(e.stage))
    except Exception as e:
        logger.exception(f"Error processing file {filename}: {e}")
        return FileOutcome.failed(filename, _error_message(e))

    logger.info(f"Successfully processed and moved file: {filename}")
    return FileOutcome.succeeded(filename, storage_key)


def _connect(session: RemoteSession, params: ConnectionParameters) -> None:
    try:
        session.connect()
    except PollerError:
        raise
    except Exception as e:
        raise TransportError(
            f"Failed to connect to SFTP server {params.host}:{params.port}: {_error_message(e)}", host=params.host
        ) from e


def _list(session: RemoteSession, params: ConnectionParameters, path: str) -> list[RemoteFileEntry]:
    try:
        return list(session.list(path))
    except PollerError:
        raise
    except Exception as e:
        raise TransportError(f"Failed to list {path}: {_error_message(e)}", host=params.host, path=path) from e


def _close(session: RemoteSession) -> None:
    # Close errors never replace the batch result or the original error
    try:
        session.close()
    except Exception as e:
        logger.warning(f"Failed to close SFTP session: {_error_message(e)}")


def _download(session: RemoteSession, source: str, filename: str) -> DownloadedPayload:
    try:
        content = session.get(source)
    except Exception as e:
        raise FileProcessingError(filename, Stage.DOWNLOAD.value, _error_message(e), cause=e) from e
    payload = DownloadedPayload(filename=filename, content=bytes(content), downloaded_at=_utcnow())
    logger.debug(f"Downloaded {filename} ({payload.size} bytes)")
    return payload


def _upload(uploader: ObjectUploader, storage_key: str, payload: DownloadedPayload) -> None:
    metadata = {
        "original-filename": payload.filename,
        "uploaded-at": _utcnow().isoformat(timespec="milliseconds").replace("+00:00", "Z"),
    }
    try:
        uploader.put_object(storage_key, payload.content, content_type=CSV_CONTENT_TYPE, metadata=metadata)
    except Exception as e:
        logger.warning(f"File processing failed, leaving file in Incoming: {payload.filename}")
        raise FileProcessingError(payload.filename, Stage.UPLOAD.value, _error_message(e), cause=e) from e


def _relocate(session: RemoteSession, source: str, destination: str, filename: str, storage_key: str) -> None:
    logger.info(f"Moving file to Processing from SFTP server: {filename}")
    try:
        session.rename(source, destination)
    except Exception as e:
        # Content is already in S3; a later poll will upload it again
        message = f"{_error_message(e)} (uploaded as {storage_key} but not moved to processing)"
        raise FileProcessingError(filename, Stage.RELOCATE.value, message, cause=e) from e


def _error_message(error: BaseException) -> str:
    return str(error) or type(error).__name__


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)

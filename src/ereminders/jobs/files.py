"""Job descriptor files on disk."""

import logging
from pathlib import Path

from ereminders.errors import ParseError
from ereminders.jobs.parser import JobParser
from ereminders.jobs.types import Job

logger = logging.getLogger(__name__)

ERROR_SUFFIX = ".ERROR"


def is_valid_job_file(path: Path) -> bool:
    """Check whether a path should be treated as a job descriptor.

    Hidden files and files that previously failed to parse are skipped.
    """
    name = path.name
    if not name or name.startswith("."):
        return False
    if path.suffix == ERROR_SUFFIX:
        return False
    return True


def mark_error(path: Path) -> Path | None:
    """Rename a descriptor that failed to parse to ``<name>.ERROR``."""
    target = path.with_name(path.name + ERROR_SUFFIX)
    try:
        path.rename(target)
    except OSError as e:
        logger.warning(
            "job_file_rename_failed",
            extra={"file.path": str(path), "error.message": str(e)},
        )
        return None
    return target


def load_job_file(path: Path, parser: JobParser) -> Job | None:
    """Read and parse one descriptor file.

    A file that fails to parse is renamed with the ``.ERROR`` suffix and None
    is returned. A file that vanished before it could be read also yields None.
    """
    try:
        content = path.read_text(encoding="utf-8", errors="replace")
    except FileNotFoundError:
        return None
    except OSError as e:
        logger.warning(
            "job_file_read_failed",
            extra={"file.path": str(path), "error.message": str(e)},
        )
        return None

    try:
        job = parser.parse(content, str(path))
    except ParseError as e:
        logger.warning(
            "job_file_parse_failed",
            extra={
                "file.path": str(path),
                "error.kind": e.kind,
                "error.message": str(e),
            },
        )
        mark_error(path)
        return None

    logger.info(
        "job_loaded",
        extra={
            "job.source_key": job.source_key,
            "job.scheduled_time": job.scheduled_time.isoformat(),
            "job.repeat": job.repeat.value,
        },
    )
    return job


def scan_directory(jobs_dir: Path, parser: JobParser) -> list[Job]:
    """Parse every valid descriptor directly inside ``jobs_dir``."""
    jobs = []
    for path in sorted(jobs_dir.iterdir()):
        if not path.is_file() or not is_valid_job_file(path):
            continue
        logger.debug(f"Parsing job file: {path}")
        job = load_job_file(path, parser)
        if job is not None:
            jobs.append(job)
    return jobs


def self_destruct(job: Job) -> None:
    """Delete the descriptor file of a one-shot job that has fired."""
    try:
        Path(job.source_key).unlink(missing_ok=True)
    except OSError as e:
        logger.warning(
            "job_file_delete_failed",
            extra={"job.source_key": job.source_key, "error.message": str(e)},
        )

"""Jobs subsystem - descriptor parsing, repeat policy and the registry.

Public API:
- JobParser: Parses descriptor text into a Job
- DateparserResolver: Natural-language date resolver
- JobRegistry: In-memory jobs keyed by source path
- advance / advance_past: Repeat cadence arithmetic

Types:
- Job: A single scheduled reminder
- RepeatKind: Repeat cadence
"""

from ereminders.jobs.parser import DateparserResolver, DateResolver, JobParser
from ereminders.jobs.registry import JobRegistry
from ereminders.jobs.repeat import advance, advance_past
from ereminders.jobs.types import Job, RepeatKind, render_descriptor

__all__ = [
    "DateResolver",
    "DateparserResolver",
    "Job",
    "JobParser",
    "JobRegistry",
    "RepeatKind",
    "advance",
    "advance_past",
    "render_descriptor",
]

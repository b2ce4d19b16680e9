"""
Turn an inbound email subject into a job title.

Subjects carry the job number as a "[J:12345]" tag for routing; the tag is
noise in a title, so it is removed along with any whitespace it leaves.
"""

import re
from typing import Optional

UNTITLED = "Untitled"

JOB_TAG_PATTERN = re.compile(r"\[J:[0-9]+\]")
WHITESPACE_PATTERN = re.compile(r"\s+")


def normalize_title(subject: Optional[str]) -> str:
    """
    Strip job tags and collapse whitespace.

    >>> normalize_title("Quote [J:12345] Request")
    'Quote Request'
    >>> normalize_title(None)
    'Untitled'
    """
    cleaned = JOB_TAG_PATTERN.sub("", subject or "")
    cleaned = WHITESPACE_PATTERN.sub(" ", cleaned).strip()
    return cleaned or UNTITLED

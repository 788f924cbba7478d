"""
Sequence code allocation for complaints.

The allocator scans persisted codes with the configured prefix and hands
out the next number. Two concurrent transactions can compute the same
code; the unique constraint on `complaints.sequence_code` rejects the
loser, and the workflow retries the whole create.
"""

import re
from typing import Iterable, Optional

from civicdesk.core.logging import get_logger
from civicdesk.repositories.complaint.complaint_repository import ComplaintRepository
from civicdesk.services.system.config_provider import SequenceFormat

logger = get_logger(__name__)

_DIGITS = re.compile(r"[0-9]+")


def numeric_suffix(code: str, prefix: str) -> Optional[int]:
    """The number after `prefix`, or None for codes that do not parse."""
    if not code or not code.startswith(prefix):
        return None
    suffix = code[len(prefix):]
    if not _DIGITS.fullmatch(suffix):
        return None
    return int(suffix)


def next_number(codes: Iterable[str], prefix: str, start_number: int) -> int:
    """
    max(existing) + 1, or `start_number` when nothing parses.

    A start number above the current maximum wins, so raising it in
    configuration moves the series forward.
    """
    numbers = [n for n in (numeric_suffix(code, prefix) for code in codes) if n is not None]
    if not numbers:
        return start_number
    return max(max(numbers) + 1, start_number)


class SequenceAllocator:
    """
    Generates complaint sequence codes such as KSC0007.

    Must be called inside the transaction that inserts the complaint.
    """

    def __init__(self, repository: ComplaintRepository):
        self.repository = repository

    def allocate(self, sequence_format: SequenceFormat) -> str:
        codes = self.repository.list_sequence_codes(sequence_format.prefix)
        number = next_number(codes, sequence_format.prefix, sequence_format.start_number)
        code = sequence_format.render(number)
        logger.debug("Allocated sequence code", extra={"sequence_code": code})
        return code

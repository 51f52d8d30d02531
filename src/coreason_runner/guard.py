# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/coreason_runner

"""Static pre-execution checks on submitted code.

This is a plain case-sensitive substring scan. It stops careless or obvious
abuse cheaply but is trivially bypassed; the sandbox's resource and network
isolation is the actual security boundary.
"""

from collections.abc import Iterable

from coreason_runner.config import DEFAULT_DENYLIST
from coreason_runner.exceptions import ValidationError

DEFAULT_MAX_CODE_BYTES = 10_000


def check_code(
    code: str,
    max_bytes: int = DEFAULT_MAX_CODE_BYTES,
    denylist: Iterable[str] = DEFAULT_DENYLIST,
) -> None:
    """Reject code that is too large or contains a denylisted pattern.

    Args:
        code: The raw source text.
        max_bytes: Ceiling on the UTF-8 encoded size.
        denylist: Substrings that may not appear in the code.

    Raises:
        ValidationError: If the code is rejected.
    """
    size = len(code.encode("utf-8"))
    if size > max_bytes:
        raise ValidationError(f"Code is too large! ({size} bytes, limit is {max_bytes})")

    for pattern in denylist:
        if pattern and pattern in code:
            raise ValidationError(f"Code contains blocked pattern: '{pattern}'")

# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/coreason_runner

from loguru import logger

from coreason_runner.exceptions import CleanupError

CLEANUP_CHANNEL = "cleanup"


def report_cleanup_failure(resource: str, name: str, cause: BaseException) -> CleanupError:
    """Route a failed removal to the cleanup log channel.

    Never raises; the returned error is for callers that want to inspect it.
    """
    error = CleanupError(resource, name, cause)
    logger.bind(channel=CLEANUP_CHANNEL, resource=resource, name=name).warning(str(error))
    return error

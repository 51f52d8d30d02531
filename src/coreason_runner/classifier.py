# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/coreason_runner

from coreason_runner.models import ClassifiedResult, ExecutionResult, Outcome


def classify(result: ExecutionResult, label: str = "Container", stderr_is_failure: bool = False) -> ClassifiedResult:
    """Map exit status and streams to an outcome and a human-readable body.

    Args:
        result: The captured execution.
        label: Prefix naming where the code ran (e.g. "Container", "Venv").
        stderr_is_failure: Report any stderr output as a failure even on a
            clean exit.

    Returns:
        ClassifiedResult: ``FAILURE`` for a non-zero exit, ``SUCCESS_WITH_WARNINGS``
        for a clean exit with stderr output, ``SUCCESS`` otherwise.
    """
    stdout, stderr = result.stdout, result.stderr

    if result.exit_code != 0:
        outcome = Outcome.FAILURE
        body = f"{label} execution failed:\nOutput:\n{stdout}\nErrors:\n{stderr}"
    elif stderr and stderr_is_failure:
        outcome = Outcome.FAILURE
        body = f"{label} Output:\n{stdout}\nErrors:\n{stderr}"
    elif stderr:
        outcome = Outcome.SUCCESS_WITH_WARNINGS
        body = f"{label} Output:\n{stdout}\nWarnings:\n{stderr}"
    else:
        outcome = Outcome.SUCCESS
        # print() terminator only
        body = stdout.removesuffix("\n")

    return ClassifiedResult(outcome=outcome, body=body, result=result)

# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.
#
# Source Code: https://github.com/CoReason-AI/coreason_runner

import hashlib

from loguru import logger


class AuditLogger:
    """
    Records execution attempts on the audit log channel.
    """

    def __init__(self, service_name: str = "coreason-runner", enabled: bool = True):
        self.service_name = service_name
        self.enabled = enabled

    async def log_pre_execution(self, code: str, strategy: str, run_id: str) -> str:
        """
        Log the code execution attempt. Returns a hash of the code.
        """
        code_hash = hashlib.sha256(code.encode("utf-8")).hexdigest()

        if self.enabled:
            logger.bind(
                audit=True,
                service=self.service_name,
                event_type="RUN_START",
                run_id=run_id,
                strategy=strategy,
                code_hash=code_hash,
                code_length=len(code),
            ).info(f"Run {run_id} starting with {strategy} (code {code_hash[:16]})")

        return code_hash

import os
import sys
import time

import pytest
from coreason_runner.process import run_process


@pytest.mark.asyncio
async def test_captures_streams_and_exit_code() -> None:
    code = "import sys; print('out'); print('err', file=sys.stderr); sys.exit(3)"
    output = await run_process([sys.executable, "-c", code], timeout=30)

    assert output.exit_code == 3
    assert output.stdout_text().strip() == "out"
    assert output.stderr_text().strip() == "err"


@pytest.mark.asyncio
async def test_undecodable_output_is_replaced() -> None:
    code = "import sys; sys.stdout.buffer.write(b'\\xff ok')"
    output = await run_process([sys.executable, "-c", code], timeout=30)

    assert output.stdout_text() == "� ok"


@pytest.mark.asyncio
async def test_timeout_terminates_process() -> None:
    start = time.time()
    with pytest.raises(TimeoutError, match="exceeded 0.5 seconds"):
        await run_process([sys.executable, "-c", "import time; time.sleep(30)"], timeout=0.5, grace_period=1.0)
    assert time.time() - start < 10


@pytest.mark.asyncio
@pytest.mark.skipif(os.name == "nt", reason="POSIX signals")
async def test_timeout_kills_process_ignoring_sigterm() -> None:
    code = "import signal, time; signal.signal(signal.SIGTERM, signal.SIG_IGN); print('ready', flush=True); time.sleep(30)"
    start = time.time()
    with pytest.raises(TimeoutError):
        await run_process([sys.executable, "-c", code], timeout=1.0, grace_period=0.5)
    assert time.time() - start < 10


@pytest.mark.asyncio
async def test_missing_executable() -> None:
    with pytest.raises(FileNotFoundError):
        await run_process(["definitely-not-a-real-binary-xyz"], timeout=5)

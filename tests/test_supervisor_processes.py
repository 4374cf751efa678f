from __future__ import annotations

import asyncio
import sys
from pathlib import Path

import pytest

from lumina.constants import STATUS_RUNNING, STATUS_STOPPED

# Both "runtimes" are the current interpreter, so index.js holds Python source
WRITE_CWD = "import os, pathlib\npathlib.Path('cwd.txt').write_text(os.getcwd())\n"
SLEEP = "import time\ntime.sleep(60)\n"
CHATTY = (
    "import sys\n"
    "for i in range(5000):\n"
    "    sys.stdout.write('x' * 100 + '\\n')\n"
    "    sys.stderr.write('y' * 100 + '\\n')\n"
)
LONG_LINE = (
    "import sys\n"
    "sys.stdout.write('z' * 200_000 + '\\n')\n"
    "for i in range(5000):\n"
    "    sys.stdout.write('x' * 100 + '\\n')\n"
)


def _write_bundle(base: Path, server_src: str, aux_src: str | None) -> Path:
    (base / "server").mkdir(parents=True)
    (base / "server" / "index.js").write_text(server_src, encoding="utf-8")
    if aux_src is not None:
        (base / "scripts").mkdir()
        (base / "scripts" / "enhanced_sanskrit_api.py").write_text(aux_src, encoding="utf-8")
    return base


@pytest.fixture
async def real_supervisor(make_supervisor):
    created = []

    def _make(base: Path):
        sup = make_supervisor(base, NODE_RUNTIME=sys.executable, PYTHON_RUNTIME=sys.executable)
        created.append(sup)
        return sup

    yield _make
    for sup in created:
        await sup.stop()


async def _wait_all(sup, timeout: float = 20.0) -> None:
    await asyncio.wait_for(
        asyncio.gather(*(h.proc.wait() for h in sup.handles())), timeout=timeout
    )


@pytest.mark.integration
async def test_services_run_in_their_own_directories(tmp_path: Path, real_supervisor):
    base = _write_bundle(tmp_path / "app", WRITE_CWD, WRITE_CWD)
    sup = real_supervisor(base)

    await sup.start()
    assert len(sup.handles()) == 2
    await _wait_all(sup)

    server_cwd = Path((base / "server" / "cwd.txt").read_text(encoding="utf-8"))
    scripts_cwd = Path((base / "scripts" / "cwd.txt").read_text(encoding="utf-8"))
    assert server_cwd.resolve() == (base / "server").resolve()
    assert scripts_cwd.resolve() == (base / "scripts").resolve()


@pytest.mark.integration
async def test_stop_terminates_long_running_services(tmp_path: Path, real_supervisor):
    base = _write_bundle(tmp_path / "app", SLEEP, SLEEP)
    sup = real_supervisor(base)
    await sup.start()
    procs = [h.proc for h in sup.handles()]
    assert await sup.status() == STATUS_RUNNING

    await sup.stop()

    assert all(p.returncode is not None for p in procs)
    assert await sup.status() == STATUS_STOPPED


@pytest.mark.integration
async def test_heavy_output_does_not_stall_the_child(tmp_path: Path, real_supervisor):
    base = _write_bundle(tmp_path / "app", CHATTY, None)
    sup = real_supervisor(base)
    await sup.start()
    proc = sup.handles()[0].proc

    # Far more than a pipe buffer on both streams; exits only if drained
    await asyncio.wait_for(proc.wait(), timeout=20.0)

    assert proc.returncode == 0
    assert await sup.status() == STATUS_STOPPED


@pytest.mark.integration
async def test_overlong_output_line_does_not_stall_the_child(tmp_path: Path, real_supervisor):
    base = _write_bundle(tmp_path / "app", LONG_LINE, None)
    sup = real_supervisor(base)
    await sup.start()
    proc = sup.handles()[0].proc

    # One line past the pipe reader's limit, then more than a pipe buffer
    await asyncio.wait_for(proc.wait(), timeout=20.0)

    assert proc.returncode == 0

"""Cross-platform solver golden-path smoke for CI.

Runs the demo solver through the CLI, digests the captured log and produces
an offline report with the fake provider.
"""

from __future__ import annotations

import json
from pathlib import Path
import subprocess
import sys
from typing import Any

ROOT = Path(__file__).resolve().parents[1]
DEMO_SOLVER = ROOT / "examples" / "solvers" / "demo_solver.py"


def _run_cli(args: list[str], *, check: bool = True) -> subprocess.CompletedProcess[str]:
    command = [sys.executable, "-m", "solverpack", *args]
    result = subprocess.run(
        command,
        capture_output=True,
        text=True,
        check=False,
    )
    if check and result.returncode != 0:
        raise RuntimeError(
            f"command failed ({result.returncode}): {' '.join(command)}\n"
            f"stdout:\n{result.stdout}\n\nstderr:\n{result.stderr}"
        )
    return result


def _write_json(path: Path, payload: dict[str, Any]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(
        json.dumps(payload, indent=2, ensure_ascii=True, sort_keys=True) + "\n",
        encoding="utf-8",
    )


def main() -> int:
    out_dir = Path("runs/solver-ci")
    out_dir.mkdir(parents=True, exist_ok=True)
    raw_log = out_dir / "demo.log"

    run = _run_cli(
        [
            "--quiet",
            "run",
            str(DEMO_SOLVER),
            "--prefix",
            f"{sys.executable} -u",
            "--args",
            "200",
            "--state-file",
            str(out_dir / "state.json"),
            "--raw-out",
            str(raw_log),
            "--json",
        ]
    )
    run_payload = json.loads(run.stdout.strip())
    _write_json(out_dir / "run.json", run_payload)
    if "Academic license" in run_payload["display_text"]:
        raise RuntimeError("display text still contains the license banner")

    digest = _run_cli(["digest", str(raw_log), "--max-chars", "4000", "--json"])
    digest_payload = json.loads(digest.stdout.strip())["digest"]
    _write_json(out_dir / "digest.json", digest_payload)
    if len(digest_payload["text"]) > 4000:
        raise RuntimeError(f"digest exceeds budget: {len(digest_payload['text'])} chars")
    if not digest_payload["json_parsed"]:
        raise RuntimeError("embedded JSON result was not parsed")

    _run_cli(
        [
            "analyze",
            str(raw_log),
            "--provider",
            "fake",
            "--out",
            str(out_dir / "report.md"),
        ]
    )
    print(f"solver golden path wrote: {out_dir}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())

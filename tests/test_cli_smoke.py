import os
import subprocess
import sys
from collections.abc import Iterable
from pathlib import Path


def run_cli(
    args: Iterable[str], cwd: Path | None = None
) -> subprocess.CompletedProcess[str]:
    env = os.environ.copy()
    root_dir = Path(__file__).parents[1]
    env["PYTHONPATH"] = str(root_dir) + os.pathsep + env.get("PYTHONPATH", "")

    # Try to find venv python
    venv_python = root_dir / ".venv" / "bin" / "python"
    executable = str(venv_python) if venv_python.exists() else sys.executable

    return subprocess.run(
        [executable, "-m", "cpdscan.cli", *args],
        capture_output=True,
        text=True,
        cwd=cwd,
        env=env,
    )


def _block(prefix: str, count: int) -> str:
    return "".join(f"int {prefix}{i} = {i};\n" for i in range(count))


def test_cli_runs(tmp_path: Path) -> None:
    (tmp_path / "A.java").write_text(_block("a", 3), "utf-8")
    (tmp_path / "B.java").write_text(_block("b", 3), "utf-8")

    result = run_cli([str(tmp_path), "--no-progress"], cwd=tmp_path)

    assert result.returncode == 0
    assert "Analysis Summary" in result.stdout
    assert "No duplicates over 50 tokens found." in result.stdout


def test_cli_duplicates_exit_code_and_reports(tmp_path: Path) -> None:
    src = tmp_path / "src"
    src.mkdir()
    code = _block("d", 12)
    (src / "A.java").write_text(code, "utf-8")
    (src / "B.java").write_text(code, "utf-8")
    xml_out = tmp_path / "cpd.xml"

    result = run_cli(
        [str(src), "--no-progress", "--processes", "2", "--xml", str(xml_out)],
        cwd=tmp_path,
    )

    assert result.returncode == 3
    assert "GATING FAILURE:" in result.stdout
    assert xml_out.read_text("utf-8").startswith(
        '<?xml version="1.0" encoding="UTF-8"?>'
    )


def test_cli_unsupported_language(tmp_path: Path) -> None:
    result = run_cli([str(tmp_path), "--language", "cobol"], cwd=tmp_path)
    assert result.returncode == 2
    assert "CONTRACT ERROR:" in result.stdout

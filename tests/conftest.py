import sys
from pathlib import Path
from typing import Any

from click.testing import CliRunner
import pytest


def _ensure_repo_on_path() -> None:
    repo_root = Path(__file__).resolve().parent.parent
    if str(repo_root) not in sys.path:
        sys.path.insert(0, str(repo_root))


_ensure_repo_on_path()

from vibe.config import AppConfig, AppPaths  # noqa: E402


@pytest.fixture(autouse=True)
def isolated_home(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.setenv("HOME", str(tmp_path))
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / ".config"))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / ".local" / "share"))
    monkeypatch.setenv("XDG_STATE_HOME", str(tmp_path / ".local" / "state"))
    monkeypatch.setenv("XDG_CACHE_HOME", str(tmp_path / ".cache"))
    for name in ("APP_NAME", "LOG_LEVEL", "LOG_FILE_NAME", "VIBE_TERM_WIDTH"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setattr(Path, "home", lambda: tmp_path)


@pytest.fixture
def app_paths() -> AppPaths:
    return AppPaths.for_app(platform="linux")


@pytest.fixture
def config() -> AppConfig:
    return AppConfig()


@pytest.fixture
def write_definition():
    def _write(root: Path, agent_id: str, name: str = "", role: str = "", body: str = "") -> Path:
        lines = []
        if name:
            lines.append(f"# {name}")
            lines.append("")
        if role:
            lines.append("## 🎯 Role: Core")
            lines.append(role)
            lines.append("")
        lines.append(body or "Agent instructions.")
        path = root / f"{agent_id}.mdc"
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text("\n".join(lines) + "\n", encoding="utf-8")
        return path

    return _write


class FakeGitService:
    def __init__(self, files: dict[str, str] | None = None, fail: bool = False) -> None:
        self.files = files or {}
        self.fail = fail
        self.calls: list[tuple[str, ...]] = []

    def clone(self, url: str, dest: Path) -> None:
        from vibe.errors import OperationError

        self.calls.append(("clone", url, str(dest)))
        if self.fail:
            raise OperationError("git clone", dest, "exit status 128")
        (dest / ".git").mkdir(parents=True, exist_ok=True)
        for relative, content in self.files.items():
            target = dest / relative
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(content, encoding="utf-8")

    def pull(self, repo: Path) -> None:
        self.calls.append(("pull", str(repo)))

    def checkout(self, repo: Path, ref: str) -> None:
        self.calls.append(("checkout", str(repo), ref))


@pytest.fixture
def fake_git():
    return FakeGitService


@pytest.fixture
def cli_runner(tmp_path: Path) -> CliRunner:
    class HomeCliRunner(CliRunner):
        def invoke(self, cli: Any, args: Any = None, **kwargs: Any):  # type: ignore[override]
            env = dict(kwargs.pop("env", {}) or {})
            env.setdefault("HOME", str(tmp_path))
            env.setdefault("XDG_CONFIG_HOME", str(tmp_path / ".config"))
            env.setdefault("XDG_DATA_HOME", str(tmp_path / ".local" / "share"))
            env.setdefault("XDG_STATE_HOME", str(tmp_path / ".local" / "state"))
            env.setdefault("VIBE_TERM_WIDTH", "200")
            kwargs["env"] = env
            return super().invoke(cli, args=args, **kwargs)

    return HomeCliRunner()

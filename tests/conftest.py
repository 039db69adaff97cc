from pathlib import Path

import pytest

from srclint.config import LintConfig


def write_tree(root: Path, files: dict[str, str]) -> Path:
    """Create `files` (relative path -> content) under `root`."""
    for rel, content in files.items():
        path = root / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
    return root


class RecordingVerifier:
    """Verifier stand-in that records every call and reports nothing."""

    def __init__(self):
        self.events: list[tuple[str, str | None]] = []

    def reset(self) -> None:
        self.events.append(("reset", None))

    def verify(self, text: str, config: LintConfig, filename: str) -> list:
        self.events.append(("verify", filename))
        return []

    @property
    def verified(self) -> list[str]:
        return [name for event, name in self.events if event == "verify"]


@pytest.fixture
def recording_verifier():
    return RecordingVerifier()


@pytest.fixture
def fixtures_dir() -> Path:
    return Path(__file__).parent / "fixtures"

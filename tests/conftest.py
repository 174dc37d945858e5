"""Shared fixtures and stand-ins for the macOS command line tools."""

import tempfile
from pathlib import Path

import pytest
from PIL import Image

from script2app import AttributeCleaner, CommandError, IconCompiler, Prompter, Resampler


class RecordingCompiler(IconCompiler):
    """Records what it was given and writes a placeholder .icns."""

    def __init__(self, succeed: bool = True):
        self.succeed = succeed
        self.calls: list[tuple[Path, Path]] = []
        self.staged: dict[str, tuple[int, int]] = {}

    def compile(self, iconset: Path, output: Path) -> Path | None:
        self.calls.append((iconset, output))
        for png in sorted(iconset.iterdir()):
            with Image.open(png) as img:
                self.staged[png.name] = img.size
        if not self.succeed:
            return None
        output.write_bytes(b"icns")
        return output


class FailingResampler(Resampler):
    """Fails like ``sips`` does on an image it cannot convert."""

    def resample(self, source: Path, size: int, output: Path) -> None:
        raise CommandError(f"sips -z {size} {size} {source} --out {output}", 13)


class RecordingCleaner(AttributeCleaner):
    """Records the trees it was asked to clear."""

    def __init__(self):
        self.cleared: list[Path] = []

    def clear(self, path: Path) -> None:
        self.cleared.append(path)


class ScriptedPrompter(Prompter):
    """Answers prompts from a list. None in the list means Cancel."""

    def __init__(self, answers, confirm: bool = True):
        self.answers = list(answers)
        self.confirm_answer = confirm
        self.asked: list[tuple[str, str]] = []
        self.notices: list[tuple[str, str]] = []

    def confirm(self, title: str, message: str) -> bool:
        return self.confirm_answer

    def ask(self, message: str, default: str = "") -> str | None:
        self.asked.append((message, default))
        return self.answers.pop(0)

    def notify(self, title: str, message: str) -> None:
        self.notices.append((title, message))


@pytest.fixture
def temp_dir():
    """Create a temporary directory for test files."""
    with tempfile.TemporaryDirectory() as tmpdirname:
        yield Path(tmpdirname)


@pytest.fixture
def sample_script(temp_dir):
    """Create a sample shell script."""
    script = temp_dir / "hello.sh"
    script.write_bytes(b"#!/bin/bash\necho 'hello'\n")
    script.chmod(0o644)
    return script


@pytest.fixture
def sample_icon(temp_dir):
    """Create a square 512x512 PNG."""
    icon = temp_dir / "icon.png"
    Image.new("RGBA", (512, 512), (200, 40, 40, 255)).save(icon)
    return icon


@pytest.fixture
def output_dir(temp_dir):
    path = temp_dir / "home"
    path.mkdir()
    return path


@pytest.fixture
def cleanup_dir(temp_dir):
    path = temp_dir / "cwd"
    path.mkdir()
    return path


@pytest.fixture
def compiler():
    return RecordingCompiler()


@pytest.fixture
def cleaner():
    return RecordingCleaner()

"""Note storage: the file-backed provider data sources read from."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path, PurePosixPath
from typing import Iterable, Protocol, runtime_checkable


class StoreUnavailableError(OSError):
    """Raised when the note store as a whole can't be read."""


@dataclass(frozen=True)
class NoteFile:
    """A note in the store."""

    path: str  # vault-relative, posix separators
    name: str  # filename without extension
    modified: float = 0.0  # mtime, seconds since the epoch

    @classmethod
    def from_path(cls, path: str, modified: float = 0.0) -> NoteFile:
        return cls(path=path, name=PurePosixPath(path).stem, modified=modified)


@runtime_checkable
class NoteStore(Protocol):
    """Stateful provider of note text."""

    def files(self) -> list[NoteFile]:
        ...

    def get_file(self, path: str) -> NoteFile | None:
        ...

    def read(self, path: str) -> str:
        ...

    def write(self, path: str, text: str) -> None:
        ...

    def create(self, path: str, text: str) -> NoteFile:
        ...

    def delete(self, path: str) -> None:
        ...

    def resolve_link(self, link_text: str, source_path: str) -> str | None:
        ...


def is_note_path(path: str) -> bool:
    """Check for a visible Markdown note path."""
    p = PurePosixPath(path)
    if any(part.startswith(".") for part in p.parts):
        return False
    return p.suffix.lower() == ".md"


class FileSystemStore:
    """Note store over a vault directory."""

    def __init__(self, vault_path: Path):
        self.vault_path = vault_path.resolve()

    def _abs(self, path: str) -> Path:
        resolved = (self.vault_path / path).resolve()
        if not resolved.is_relative_to(self.vault_path):
            raise ValueError(f"Path escapes the vault: {path}")
        return resolved

    def _note_file(self, file_path: Path) -> NoteFile:
        rel = file_path.relative_to(self.vault_path).as_posix()
        return NoteFile.from_path(rel, modified=file_path.stat().st_mtime)

    def files(self) -> list[NoteFile]:
        """All visible notes in the vault, sorted by path.

        Raises:
            StoreUnavailableError: If the vault directory is missing
        """
        if not self.vault_path.is_dir():
            raise StoreUnavailableError(f"Vault directory not found: {self.vault_path}")

        result = []
        for md_file in self.vault_path.rglob("*.md"):
            rel = md_file.relative_to(self.vault_path).as_posix()
            if not is_note_path(rel) or not md_file.is_file():
                continue
            result.append(self._note_file(md_file))
        return sorted(result, key=lambda f: f.path)

    def get_file(self, path: str) -> NoteFile | None:
        file_path = self._abs(path)
        if not file_path.is_file():
            return None
        return NoteFile.from_path(path, modified=file_path.stat().st_mtime)

    def read(self, path: str) -> str:
        return self._abs(path).read_text(encoding="utf-8")

    def write(self, path: str, text: str) -> None:
        self._abs(path).write_text(text, encoding="utf-8")

    def create(self, path: str, text: str) -> NoteFile:
        file_path = self._abs(path)
        if file_path.exists():
            raise FileExistsError(f"Note already exists: {path}")
        file_path.parent.mkdir(parents=True, exist_ok=True)
        file_path.write_text(text, encoding="utf-8")
        return self._note_file(file_path)

    def delete(self, path: str) -> None:
        self._abs(path).unlink()

    def resolve_link(self, link_text: str, source_path: str) -> str | None:
        """Resolve one wiki-link target against a fresh listing.

        Use a LinkIndex when resolving many links.
        """
        return LinkIndex(self.files()).resolve(link_text, source_path)


class LinkIndex:
    """Wiki-link resolution over a fixed listing of notes, without I/O."""

    def __init__(self, files: Iterable[NoteFile]):
        self.paths: set[str] = set()
        self.by_name: dict[str, list[str]] = {}
        for file in sorted(files, key=lambda f: f.path):
            self.paths.add(file.path)
            self.by_name.setdefault(file.name.lower(), []).append(file.path)

    def resolve(self, link_text: str, source_path: str) -> str | None:
        """Resolve a wiki-link target to a note path.

        Path-like targets resolve against the vault root; bare names match
        note filenames case-insensitively, preferring the source's folder.
        """
        target = link_text.split("#", 1)[0].strip()
        if not target:
            return None

        if "/" in target:
            candidate = target if target.lower().endswith(".md") else f"{target}.md"
            return candidate if candidate in self.paths else None

        name = target[:-3] if target.lower().endswith(".md") else target
        matches = self.by_name.get(name.lower())
        if not matches:
            return None
        source_dir = str(PurePosixPath(source_path).parent)
        for match in matches:
            if str(PurePosixPath(match).parent) == source_dir:
                return match
        return matches[0]

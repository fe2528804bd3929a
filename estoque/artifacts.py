"""Generated files and the local file system."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
PDF_MEDIA_TYPE = "application/pdf"
JSON_MEDIA_TYPE = "application/json"
CSV_MEDIA_TYPE = "text/csv"


@dataclass
class Artifact:
    """A generated file ready to be handed to the user."""

    filename: str
    content: bytes
    media_type: str


def save_artifact(artifact: Artifact, directory: str | Path = ".") -> Path:
    """Write an artifact into a directory, replacing any file of that name.

    Returns:
        Path to the written file.

    Raises:
        OSError: If the directory cannot be created or written.
    """
    directory = Path(directory).expanduser()
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / artifact.filename
    path.write_bytes(artifact.content)
    return path


def read_file(path: str | Path) -> bytes:
    """Read a user-chosen file.

    Raises:
        FileNotFoundError: If the file doesn't exist.
        OSError: If it can't be read.
    """
    path = Path(path).expanduser()
    if not path.is_file():
        raise FileNotFoundError(f"Arquivo não encontrado: {path}")
    return path.read_bytes()

"""Publish export and backup artifacts to Google Drive.

Artifacts are streamed from memory, keeping their dated filename and media
type. JSON backups can be routed to a folder of their own.
"""

from __future__ import annotations

import logging
from io import BytesIO
from pathlib import Path

from .artifacts import JSON_MEDIA_TYPE, Artifact
from .config import GDriveConfig

logger = logging.getLogger(__name__)

SCOPES = ["https://www.googleapis.com/auth/drive.file"]

_INSTALL_HINT = (
    "Pacotes do Google Drive não instalados:\n"
    "  pip install 'estoque[gdrive]'"
)


def _authorize(credentials_path: Path, token_path: Path):
    """Return OAuth credentials for the Drive API.

    A saved token is reused and refreshed when possible; otherwise the
    browser consent flow runs once and the new token is written back.

    Raises:
        ImportError: If the Google client packages are not installed.
        FileNotFoundError: If consent is needed and there is no client file.
    """
    try:
        from google.auth.transport.requests import Request
        from google.oauth2.credentials import Credentials
        from google_auth_oauthlib.flow import InstalledAppFlow
    except ImportError:
        raise ImportError(_INSTALL_HINT)

    creds = None
    if token_path.exists():
        creds = Credentials.from_authorized_user_file(str(token_path), SCOPES)
    if creds is not None and creds.valid:
        return creds

    if creds is not None and creds.expired and creds.refresh_token:
        creds.refresh(Request())
    else:
        if not credentials_path.exists():
            raise FileNotFoundError(
                f"Arquivo de credenciais OAuth não encontrado: {credentials_path}\n"
                f"Baixe-o no Google Cloud Console."
            )
        flow = InstalledAppFlow.from_client_secrets_file(str(credentials_path), SCOPES)
        creds = flow.run_local_server(port=0)

    token_path.parent.mkdir(parents=True, exist_ok=True)
    token_path.write_text(creds.to_json())
    return creds


class DriveArchive:
    """Drive folders that receive the artifacts produced by the exporter."""

    def __init__(self, config: GDriveConfig) -> None:
        self._config = config
        self._service = None

    @property
    def service(self):
        if self._service is None:
            try:
                from googleapiclient.discovery import build
            except ImportError:
                raise ImportError(_INSTALL_HINT)
            creds = _authorize(
                Path(self._config.credentials_path).expanduser(),
                Path(self._config.token_path).expanduser(),
            )
            self._service = build("drive", "v3", credentials=creds)
        return self._service

    def folder_for(self, artifact: Artifact) -> str:
        """The configured folder for an artifact ("" means Drive root)."""
        if artifact.media_type == JSON_MEDIA_TYPE and self._config.backup_folder_id:
            return self._config.backup_folder_id
        return self._config.folder_id

    def publish(self, artifact: Artifact, folder_id: str | None = None) -> str:
        """Upload an artifact and return its Drive file ID.

        ``folder_id`` overrides the configured folder.

        Raises:
            ImportError: If the Google client packages are not installed.
            FileNotFoundError: If authorization needs a missing client file.
        """
        try:
            from googleapiclient.http import MediaIoBaseUpload
        except ImportError:
            raise ImportError(_INSTALL_HINT)

        metadata: dict = {"name": artifact.filename, "mimeType": artifact.media_type}
        parent = folder_id or self.folder_for(artifact)
        if parent:
            metadata["parents"] = [parent]
        media = MediaIoBaseUpload(
            BytesIO(artifact.content), mimetype=artifact.media_type, resumable=True
        )

        result = (
            self.service.files()
            .create(body=metadata, media_body=media, fields="id")
            .execute()
        )
        logger.info("Enviado ao Google Drive: %s (%s)", artifact.filename, result["id"])
        return result["id"]

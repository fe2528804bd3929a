"""TOML configuration loader."""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass, field
from pathlib import Path

if sys.version_info >= (3, 11):
    import tomllib
else:
    try:
        import tomli as tomllib
    except ImportError:
        tomllib = None  # type: ignore[assignment]


@dataclass
class SQLiteConfig:
    path: str = "~/.config/estoque/estoque.db"


@dataclass
class SupabaseConfig:
    url: str = ""
    api_key: str = ""
    timeout: float = 30.0
    page_size: int = 1000


@dataclass
class StoreConfig:
    backend: str = "sqlite"
    sqlite: SQLiteConfig = field(default_factory=SQLiteConfig)
    supabase: SupabaseConfig = field(default_factory=SupabaseConfig)


@dataclass
class OrganizationConfig:
    """Printed in the header and footer of PDF exports."""

    company_name: str = ""
    cnpj: str = ""
    address: str = ""
    logo_path: str = ""
    secretary_name: str = ""
    coordinator_name: str = ""
    developer_name: str = ""


@dataclass
class ExportConfig:
    output_dir: str = "."


@dataclass
class PrinterConfig:
    enabled: bool = False
    printer_name: str = ""


@dataclass
class GDriveConfig:
    enabled: bool = False
    credentials_path: str = "~/.config/estoque/gdrive_credentials.json"
    token_path: str = "~/.config/estoque/gdrive_token.json"
    folder_id: str = ""
    # Backups go here when set, otherwise to folder_id
    backup_folder_id: str = ""


@dataclass
class BackupConfig:
    schedule: str = "0 2 * * *"
    output_dir: str = "~/.config/estoque/backups"
    upload: bool = False


@dataclass
class EstoqueConfig:
    store: StoreConfig = field(default_factory=StoreConfig)
    organization: OrganizationConfig = field(default_factory=OrganizationConfig)
    export: ExportConfig = field(default_factory=ExportConfig)
    printer: PrinterConfig = field(default_factory=PrinterConfig)
    gdrive: GDriveConfig = field(default_factory=GDriveConfig)
    backup: BackupConfig = field(default_factory=BackupConfig)


def load_config(path: str | Path | None = None) -> EstoqueConfig:
    """Load configuration from a TOML file.

    Falls back to defaults if no path is given or the file doesn't exist.
    Supabase credentials can be supplied via environment variables.
    """
    raw: dict = {}

    if path is not None:
        p = Path(path)
        if p.exists():
            if tomllib is None:
                raise ImportError(
                    "tomli é necessário no Python < 3.11: pip install tomli"
                )
            with open(p, "rb") as f:
                raw = tomllib.load(f)

    sto = raw.get("store", {})
    org = raw.get("organization", {})
    exp = raw.get("export", {})
    prn = raw.get("printer", {})
    gdr = raw.get("gdrive", {})
    bkp = raw.get("backup", {})

    sqlite_cfg = sto.get("sqlite", {})
    supabase_cfg = sto.get("supabase", {})

    # Resolve credentials: config file → environment variable
    supabase_url = supabase_cfg.get("url", "") or os.environ.get("SUPABASE_URL", "")
    supabase_key = supabase_cfg.get("api_key", "") or os.environ.get(
        "SUPABASE_KEY", ""
    )

    defaults = EstoqueConfig()

    return EstoqueConfig(
        store=StoreConfig(
            backend=sto.get("backend", "sqlite"),
            sqlite=SQLiteConfig(
                path=sqlite_cfg.get("path", defaults.store.sqlite.path),
            ),
            supabase=SupabaseConfig(
                url=supabase_url,
                api_key=supabase_key,
                timeout=supabase_cfg.get("timeout", 30.0),
                page_size=supabase_cfg.get("page_size", 1000),
            ),
        ),
        organization=OrganizationConfig(
            company_name=org.get("company_name", ""),
            cnpj=org.get("cnpj", ""),
            address=org.get("address", ""),
            logo_path=org.get("logo_path", ""),
            secretary_name=org.get("secretary_name", ""),
            coordinator_name=org.get("coordinator_name", ""),
            developer_name=org.get("developer_name", ""),
        ),
        export=ExportConfig(
            output_dir=exp.get("output_dir", "."),
        ),
        printer=PrinterConfig(
            enabled=prn.get("enabled", False),
            printer_name=prn.get("printer_name", ""),
        ),
        gdrive=GDriveConfig(
            enabled=gdr.get("enabled", False),
            credentials_path=gdr.get(
                "credentials_path", defaults.gdrive.credentials_path
            ),
            token_path=gdr.get("token_path", defaults.gdrive.token_path),
            folder_id=gdr.get("folder_id", ""),
            backup_folder_id=gdr.get("backup_folder_id", ""),
        ),
        backup=BackupConfig(
            schedule=bkp.get("schedule", defaults.backup.schedule),
            output_dir=bkp.get("output_dir", defaults.backup.output_dir),
            upload=bkp.get("upload", False),
        ),
    )

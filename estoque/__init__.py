"""Data interchange and backup for the inventory dashboard."""

from .artifacts import Artifact, read_file, save_artifact
from .backup import BACKUP_VERSION, from_envelope, to_envelope
from .config import EstoqueConfig, load_config
from .errors import FormatError, InterchangeError, StoreError, ValidationError
from .exporter import Exporter
from .notify import ConsoleNotifier, MemoryNotifier, Notification, Notifier
from .reconciler import ImportReport, import_from_backup, import_from_workbook
from .schema import COLLECTIONS, RESTORE_ORDER, Selection
from .service import DataInterchange
from .store import DataStore, create_store

__all__ = [
    "Artifact",
    "read_file",
    "save_artifact",
    "BACKUP_VERSION",
    "to_envelope",
    "from_envelope",
    "EstoqueConfig",
    "load_config",
    "InterchangeError",
    "ValidationError",
    "FormatError",
    "StoreError",
    "Exporter",
    "Notification",
    "Notifier",
    "ConsoleNotifier",
    "MemoryNotifier",
    "ImportReport",
    "import_from_workbook",
    "import_from_backup",
    "COLLECTIONS",
    "RESTORE_ORDER",
    "Selection",
    "DataInterchange",
    "DataStore",
    "create_store",
]

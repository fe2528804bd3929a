"""Send PDF artifacts to a CUPS printer."""

from __future__ import annotations

import logging
import shutil
import subprocess
from dataclasses import dataclass

from .artifacts import PDF_MEDIA_TYPE, Artifact

logger = logging.getLogger(__name__)

LIST_TIMEOUT = 10
PRINT_TIMEOUT = 30

_CUPS_HINT = (
    "Verifique se o CUPS está instalado:\n"
    "  Ubuntu/Debian: sudo apt install cups\n"
    "  Fedora/RHEL:   sudo dnf install cups"
)


@dataclass
class PrinterInfo:
    name: str
    is_default: bool


def _require(command: str) -> None:
    if shutil.which(command) is None:
        raise RuntimeError(f"Comando {command} não encontrado. {_CUPS_HINT}")


def _lpstat(flag: str) -> str:
    """stdout of ``lpstat <flag>``, or "" when it fails."""
    try:
        result = subprocess.run(
            ["lpstat", flag], capture_output=True, text=True, timeout=LIST_TIMEOUT
        )
    except (subprocess.TimeoutExpired, OSError):
        logger.debug("lpstat %s falhou", flag, exc_info=True)
        return ""
    return result.stdout if result.returncode == 0 else ""


def parse_printers(default_output: str, listing_output: str) -> list[PrinterInfo]:
    """Read printer names from ``lpstat -d`` and ``lpstat -p`` output."""
    # "system default destination: Name"
    default_name = ""
    if ":" in default_output:
        default_name = default_output.strip().rsplit(":", 1)[-1].strip()

    printers = []
    for line in listing_output.splitlines():
        # "printer Name is idle. ..."
        parts = line.split()
        if len(parts) >= 2 and parts[0] == "printer":
            printers.append(PrinterInfo(parts[1], parts[1] == default_name))
    return printers


class Printer:
    """Thin wrapper around lpstat / lpr."""

    @staticmethod
    def list_printers() -> list[PrinterInfo]:
        """List printers known to CUPS, flagging the default one.

        Raises:
            RuntimeError: If lpstat is not available.
        """
        _require("lpstat")
        return parse_printers(_lpstat("-d"), _lpstat("-p"))

    @staticmethod
    def print_artifact(artifact: Artifact, printer_name: str | None = None) -> None:
        """Queue a PDF export on the given (or default) printer.

        The document is piped to lpr; the job is titled with its filename.

        Raises:
            ValueError: If the artifact is not a PDF.
            RuntimeError: If lpr is missing, fails or times out.
        """
        if artifact.media_type != PDF_MEDIA_TYPE:
            raise ValueError(f"Somente PDFs podem ser impressos: {artifact.filename}")
        _require("lpr")

        cmd = ["lpr", "-T", artifact.filename]
        if printer_name:
            cmd.extend(["-P", printer_name])

        try:
            result = subprocess.run(
                cmd, input=artifact.content, capture_output=True, timeout=PRINT_TIMEOUT
            )
        except subprocess.TimeoutExpired:
            raise RuntimeError("Tempo esgotado ao enviar o trabalho de impressão.")
        if result.returncode != 0:
            stderr = result.stderr.decode("utf-8", errors="replace").strip()
            raise RuntimeError(f"Falha na impressão: {stderr}")
        logger.info("Impressão enviada: %s", artifact.filename)

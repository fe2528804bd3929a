"""Tests for printer module."""

import subprocess
from unittest.mock import MagicMock, patch

import pytest

from estoque.artifacts import PDF_MEDIA_TYPE, XLSX_MEDIA_TYPE, Artifact
from estoque.printer import Printer, parse_printers

PDF = Artifact("exportacao-2025-01-15-0905.pdf", b"%PDF-1.4", PDF_MEDIA_TYPE)


def _result(returncode=0, stdout="", stderr=""):
    result = MagicMock()
    result.returncode = returncode
    result.stdout = stdout
    result.stderr = stderr
    return result


class TestListPrinters:
    def test_no_lpstat(self):
        with patch("shutil.which", return_value=None):
            with pytest.raises(RuntimeError, match="lpstat"):
                Printer.list_printers()

    def test_with_printers(self):
        default = _result(stdout="system default destination: HP_LaserJet\n")
        listing = _result(stdout=(
            "printer HP_LaserJet is idle.\n"
            "printer Brother_HL disabled since ...\n"
        ))
        with patch("shutil.which", return_value="/usr/bin/lpstat"):
            with patch("subprocess.run", side_effect=[default, listing]):
                printers = Printer.list_printers()

        assert [(p.name, p.is_default) for p in printers] == [
            ("HP_LaserJet", True),
            ("Brother_HL", False),
        ]

    def test_empty(self):
        with patch("shutil.which", return_value="/usr/bin/lpstat"):
            with patch("subprocess.run", side_effect=[_result(1), _result()]):
                assert Printer.list_printers() == []

    def test_parse_without_default(self):
        printers = parse_printers("no system default destination\n", "printer Epson is idle.\n")
        assert [(p.name, p.is_default) for p in printers] == [("Epson", False)]


class TestPrintArtifact:
    def test_only_pdf(self):
        sheet = Artifact("exportacao.xlsx", b"PK", XLSX_MEDIA_TYPE)
        with pytest.raises(ValueError, match="Somente PDFs"):
            Printer.print_artifact(sheet)

    def test_no_lpr(self):
        with patch("shutil.which", return_value=None):
            with pytest.raises(RuntimeError, match="lpr"):
                Printer.print_artifact(PDF)

    def test_default_printer(self):
        with patch("shutil.which", return_value="/usr/bin/lpr"):
            with patch("subprocess.run", return_value=_result()) as mock_run:
                Printer.print_artifact(PDF)

        cmd = mock_run.call_args[0][0]
        assert cmd == ["lpr", "-T", "exportacao-2025-01-15-0905.pdf"]
        assert mock_run.call_args.kwargs["input"] == b"%PDF-1.4"

    def test_named_printer(self):
        with patch("shutil.which", return_value="/usr/bin/lpr"):
            with patch("subprocess.run", return_value=_result()) as mock_run:
                Printer.print_artifact(PDF, printer_name="Brother_HL")

        cmd = mock_run.call_args[0][0]
        assert cmd[-2:] == ["-P", "Brother_HL"]

    def test_failure(self):
        with patch("shutil.which", return_value="/usr/bin/lpr"):
            with patch("subprocess.run", return_value=_result(1, stderr=b"No printer")):
                with pytest.raises(RuntimeError, match="Falha na impressão: No printer"):
                    Printer.print_artifact(PDF)

    def test_timeout(self):
        with patch("shutil.which", return_value="/usr/bin/lpr"):
            with patch(
                "subprocess.run",
                side_effect=subprocess.TimeoutExpired(cmd="lpr", timeout=30),
            ):
                with pytest.raises(RuntimeError, match="Tempo esgotado"):
                    Printer.print_artifact(PDF)

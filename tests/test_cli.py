"""Tests for the estoque CLI."""

from unittest.mock import MagicMock, patch

import pytest

from estoque.cli import main


@pytest.fixture
def config_file(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    path = tmp_path / "estoque.toml"
    path.write_text(
        f"""\
[store.sqlite]
path = "{(tmp_path / 'estoque.db').as_posix()}"

[export]
output_dir = "{(tmp_path / 'saida').as_posix()}"
""",
        encoding="utf-8",
    )
    return path


def test_no_command_prints_help(capsys):
    with pytest.raises(SystemExit) as exc_info:
        main([])
    assert exc_info.value.code == 1
    assert "estoque" in capsys.readouterr().out


def test_template_command(config_file, tmp_path, capsys):
    main(["-c", str(config_file), "template", "products"])

    files = list((tmp_path / "saida").iterdir())
    assert len(files) == 1
    assert files[0].name.startswith("modelo-products-")
    assert "Modelo gerado com sucesso!" in capsys.readouterr().out


def test_template_import_backup_restore_cycle(config_file, tmp_path, capsys):
    main(["-c", str(config_file), "template", "storage_locations"])
    template = next((tmp_path / "saida").glob("modelo-*.xlsx"))

    main(["-c", str(config_file), "import", str(template)])
    assert "2 registros importados com sucesso!" in capsys.readouterr().out

    main(["-c", str(config_file), "backup", "-o", str(tmp_path / "bkp")])
    backup = next((tmp_path / "bkp").glob("backup-estoque-*.json"))

    main(["-c", str(config_file), "restore", str(backup), "-t", "storage_locations"])
    assert "2 registros importados com sucesso!" in capsys.readouterr().out


def test_export_empty_report_fails(config_file, capsys):
    with pytest.raises(SystemExit) as exc_info:
        main(["-c", str(config_file), "report", "relatorio_estoque"])
    assert exc_info.value.code == 1
    assert "Nenhum dado para exportar" in capsys.readouterr().err


def test_import_missing_file_fails(config_file, capsys):
    with pytest.raises(SystemExit):
        main(["-c", str(config_file), "import", "nao-existe.xlsx"])
    assert "Erro ao importar arquivo" in capsys.readouterr().err


def test_unknown_backend_fails(tmp_path, capsys):
    path = tmp_path / "estoque.toml"
    path.write_text('[store]\nbackend = "mongo"\n', encoding="utf-8")
    with pytest.raises(SystemExit):
        main(["-c", str(path), "backup"])
    assert "mongo" in capsys.readouterr().err


def test_printers_command(capsys):
    from estoque.printer import PrinterInfo

    with patch(
        "estoque.printer.Printer.list_printers",
        return_value=[PrinterInfo("HP", True)],
    ):
        main(["printers"])
    out = capsys.readouterr().out
    assert "HP (padrão)" in out


def test_backup_drive_publishes_artifact(config_file, capsys):
    archive = MagicMock()
    archive.publish.return_value = "file_1"
    with patch("estoque.gdrive.DriveArchive", return_value=archive):
        main(["-c", str(config_file), "backup", "--drive", "--drive-folder", "pasta"])

    artifact = archive.publish.call_args.args[0]
    assert artifact.filename.startswith("backup-estoque-")
    assert artifact.media_type == "application/json"
    assert archive.publish.call_args.kwargs["folder_id"] == "pasta"
    assert "File ID: file_1" in capsys.readouterr().out


def test_export_pdf_prints_artifact(config_file, capsys):
    pytest.importorskip("reportlab")
    with patch("estoque.printer.Printer.print_artifact") as print_artifact:
        main(["-c", str(config_file), "export", "-f", "pdf", "--printer", "HP"])

    artifact = print_artifact.call_args.args[0]
    assert artifact.filename.endswith(".pdf")
    assert artifact.content.startswith(b"%PDF")
    assert print_artifact.call_args.kwargs["printer_name"] == "HP"
    assert "Trabalho de impressão enviado: HP" in capsys.readouterr().out

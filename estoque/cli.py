"""CLI entry point."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from dotenv import load_dotenv

from . import schema
from .artifacts import Artifact, save_artifact
from .config import EstoqueConfig, load_config
from .exporter import FORMATS, PRINTABLE, SPREADSHEET
from .notify import ConsoleNotifier
from .printable import DocumentHeader
from .reports import REPORTS
from .service import DataInterchange
from .store import create_store


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(
        prog="estoque",
        description="Exportação, importação e backup dos dados do estoque",
    )
    parser.add_argument(
        "--config",
        "-c",
        type=str,
        default=None,
        help="caminho do arquivo de configuração (TOML)",
    )
    parser.add_argument(
        "--verbose", "-v", action="store_true", help="log detalhado"
    )

    sub = parser.add_subparsers(dest="command")

    # export
    export_parser = sub.add_parser("export", help="exportar tabelas (xlsx ou pdf)")
    _add_tables(export_parser)
    export_parser.add_argument(
        "--format", "-f", choices=FORMATS, default=SPREADSHEET, dest="fmt",
        help="formato do arquivo (padrão: xlsx)",
    )
    _add_output(export_parser)
    export_parser.add_argument(
        "--print", action="store_true", dest="do_print",
        help="imprimir o PDF na impressora padrão",
    )
    export_parser.add_argument(
        "--printer", type=str, default=None, help="imprimir na impressora indicada",
    )
    _add_drive(export_parser)

    # backup
    backup_parser = sub.add_parser("backup", help="gerar backup JSON de todas as tabelas")
    _add_output(backup_parser)
    _add_drive(backup_parser)

    # restore
    restore_parser = sub.add_parser("restore", help="restaurar um backup JSON")
    restore_parser.add_argument("file", type=str, help="arquivo de backup")
    _add_tables(restore_parser)

    # import
    import_parser = sub.add_parser("import", help="importar uma planilha xlsx")
    import_parser.add_argument("file", type=str, help="planilha a importar")

    # template
    template_parser = sub.add_parser("template", help="baixar modelo de importação")
    template_parser.add_argument("collection", choices=schema.COLLECTIONS)
    _add_output(template_parser)

    # report
    report_parser = sub.add_parser("report", help="exportar relatório em CSV")
    report_parser.add_argument("name", choices=sorted(REPORTS))
    _add_output(report_parser)

    # printers
    sub.add_parser("printers", help="listar impressoras disponíveis")

    # schedule
    sub.add_parser("schedule", help="executar backups agendados")

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(1)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    load_dotenv()
    config = load_config(args.config)

    match args.command:
        case "printers":
            _cmd_printers()
        case "schedule":
            _cmd_schedule(config)
        case _:
            try:
                ok = asyncio.run(_run(config, args))
            except ValueError as e:
                # Misconfigured store backend
                print(str(e), file=sys.stderr)
                sys.exit(1)
            if not ok:
                sys.exit(1)


def _add_tables(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--tables", "-t", nargs="+", choices=schema.COLLECTIONS, default=None,
        help="tabelas a incluir (padrão: todas)",
    )


def _add_output(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--output", "-o", type=str, default=None,
        help="diretório de destino (padrão: export.output_dir)",
    )


def _add_drive(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--drive", action="store_true", help="enviar ao Google Drive",
    )
    parser.add_argument(
        "--drive-folder", type=str, default=None, help="ID da pasta no Google Drive",
    )


def _selection(args) -> schema.Selection:
    if args.tables is None:
        return schema.Selection()
    return schema.Selection.of(args.tables)


async def _run(config: EstoqueConfig, args) -> bool:
    store = create_store(config)
    service = DataInterchange(
        store,
        ConsoleNotifier(),
        header=DocumentHeader.from_organization(config.organization),
    )
    try:
        match args.command:
            case "export":
                artifact = await service.export_selected(_selection(args), args.fmt)
            case "backup":
                artifact = await service.export_backup()
            case "template":
                artifact = service.export_template(args.collection)
            case "report":
                artifact = await service.export_report(args.name)
            case "import":
                return await service.import_workbook_file(args.file) is not None
            case "restore":
                report = await service.restore_backup_file(args.file, _selection(args))
                return report is not None
            case _:
                raise ValueError(f"Comando desconhecido: {args.command}")
    finally:
        await store.close()

    if artifact is None:
        return False
    path = _save(artifact, args.output or config.export.output_dir)
    if path is None:
        return False

    # [printer] / [gdrive] enabled = true turns these on without flags
    if getattr(args, "fmt", None) == PRINTABLE and (
        args.do_print or args.printer or config.printer.enabled
    ):
        _print(artifact, args.printer or config.printer.printer_name or None)
    if getattr(args, "drive", False) or (
        config.gdrive.enabled and args.command in ("export", "backup")
    ):
        _upload(config, artifact, args.drive_folder)
    return True


def _save(artifact: Artifact, directory: str) -> Path | None:
    try:
        path = save_artifact(artifact, directory)
    except OSError as e:
        print(f"Erro ao salvar arquivo: {e}", file=sys.stderr)
        return None
    print(f"  Arquivo salvo: {path}")
    return path


def _print(artifact: Artifact, printer_name: str | None) -> None:
    from .printer import Printer

    try:
        Printer.print_artifact(artifact, printer_name=printer_name)
    except (RuntimeError, ValueError) as e:
        print(f"Erro de impressão: {e}", file=sys.stderr)
        return
    print(f"  Trabalho de impressão enviado: {printer_name or 'impressora padrão'}")


def _upload(config: EstoqueConfig, artifact: Artifact, folder_id: str | None) -> None:
    from .gdrive import DriveArchive

    try:
        file_id = DriveArchive(config.gdrive).publish(artifact, folder_id=folder_id)
    except (ImportError, FileNotFoundError) as e:
        print(f"Erro no Google Drive: {e}", file=sys.stderr)
        return
    print(f"  Envio concluído: {artifact.filename} (File ID: {file_id})")


def _cmd_printers() -> None:
    from .printer import Printer

    try:
        printers = Printer.list_printers()
    except RuntimeError as e:
        print(str(e), file=sys.stderr)
        sys.exit(1)

    if not printers:
        print("Nenhuma impressora disponível.")
        return
    print(f"Impressoras disponíveis: {len(printers)}")
    for p in printers:
        default_mark = " (padrão)" if p.is_default else ""
        print(f"  {p.name}{default_mark}")


def _cmd_schedule(config: EstoqueConfig) -> None:
    from .scheduler import BackupScheduler

    async def serve() -> None:
        scheduler = BackupScheduler(config)
        scheduler.start()
        for job in scheduler.get_jobs():
            print(f"  {job['name']}: próxima execução {job['next_run']}")
        try:
            await asyncio.Event().wait()
        finally:
            scheduler.stop()

    try:
        asyncio.run(serve())
    except ImportError as e:
        print(str(e), file=sys.stderr)
        sys.exit(1)
    except KeyboardInterrupt:
        pass

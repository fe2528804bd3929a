"""Tests for the notification-emitting service facade."""

import asyncio
from datetime import datetime

from estoque import schema
from estoque.backup import dumps_envelope, to_envelope
from estoque.notify import ERROR, SUCCESS, WARNING, MemoryNotifier
from estoque.service import DataInterchange
from estoque.workbook import to_workbook, workbook_to_bytes

FIXED = datetime(2025, 1, 15, 9, 5)


def _service(store):
    notifier = MemoryNotifier()
    return DataInterchange(store, notifier, clock=lambda: FIXED), notifier


def test_export_success_notifies_once(make_store, sample_data):
    service, notifier = _service(make_store(sample_data))

    artifact = asyncio.run(service.export_selected(schema.Selection()))

    assert artifact is not None
    assert len(notifier.notifications) == 1
    assert notifier.last.title == "Dados exportados com sucesso!"
    assert notifier.last.severity == SUCCESS


def test_empty_selection_notifies_error(make_store):
    store = make_store()
    service, notifier = _service(store)

    artifact = asyncio.run(service.export_selected(schema.Selection.none()))

    assert artifact is None
    assert store.calls == []
    assert notifier.last.title == "Selecione pelo menos uma tabela"
    assert notifier.last.severity == ERROR


def test_read_failure_notifies_error(make_store, sample_data):
    service, notifier = _service(make_store(sample_data, fail_reads={"products"}))

    assert asyncio.run(service.export_selected(schema.Selection())) is None
    assert notifier.last.title == "Erro ao exportar dados"
    assert "falha de leitura" in notifier.last.description


def test_import_workbook_reports_partial_failure(make_store, sample_data):
    store = make_store(fail_on={"invoices"})
    service, notifier = _service(store)
    content = workbook_to_bytes(to_workbook({
        "invoices": sample_data["invoices"],
        "storage_locations": sample_data["storage_locations"],
    }))

    report = asyncio.run(service.import_workbook(content))

    assert report.success_count == 1
    assert len(notifier.notifications) == 1
    assert notifier.last.severity == WARNING
    assert notifier.last.title == "Importação concluída com avisos"


def test_import_invalid_file(make_store):
    store = make_store()
    service, notifier = _service(store)

    assert asyncio.run(service.import_workbook(b"lixo")) is None
    assert notifier.last.title == "Erro ao importar arquivo"
    assert notifier.last.severity == ERROR
    assert store.calls == []


def test_import_missing_file(make_store, tmp_path):
    service, notifier = _service(make_store())

    assert asyncio.run(service.import_workbook_file(tmp_path / "nada.xlsx")) is None
    assert notifier.last.title == "Erro ao importar arquivo"
    assert "nada.xlsx" in notifier.last.description


def test_restore_backup_file(make_store, sample_data, tmp_path):
    path = tmp_path / "backup.json"
    path.write_text(dumps_envelope(to_envelope(sample_data)), encoding="utf-8")
    store = make_store()
    service, notifier = _service(store)

    report = asyncio.run(
        service.restore_backup_file(path, schema.Selection.of(["products", "storage_locations"]))
    )

    assert report.success_count == 3
    assert store.writes() == ["storage_locations", "products"]
    assert notifier.last.title == "3 registros importados com sucesso!"


def test_restore_rejects_bad_envelope(make_store):
    store = make_store()
    service, notifier = _service(store)

    assert asyncio.run(service.restore_backup(b'{"version": "1.0"}')) is None
    assert notifier.last.title == "Erro ao restaurar backup"
    assert store.calls == []


def test_restore_with_empty_selection(make_store, sample_data):
    store = make_store()
    service, notifier = _service(store)
    content = dumps_envelope(to_envelope(sample_data)).encode("utf-8")

    assert asyncio.run(service.restore_backup(content, schema.Selection.none())) is None
    assert notifier.last.title == "Selecione pelo menos uma tabela"


def test_template_and_report(make_store, sample_data):
    service, notifier = _service(make_store(sample_data))

    template = service.export_template("shopping_list")
    assert template.filename == "modelo-shopping_list-2025-01-15.xlsx"
    assert notifier.last.title == "Modelo gerado com sucesso!"

    report = asyncio.run(service.export_report("relatorio_estoque"))
    assert report.filename == "relatorio_estoque_2025-01-15.csv"
    assert notifier.last.severity == SUCCESS


def test_backup_notification_names_file(make_store, sample_data):
    service, notifier = _service(make_store(sample_data))

    artifact = asyncio.run(service.export_backup())

    assert artifact.filename == "backup-estoque-2025-01-15.json"
    assert notifier.last.description == artifact.filename


def test_restore_rows_that_are_not_objects(tmp_path):
    from estoque.store.sqlite import SQLiteStore

    store = SQLiteStore(db_path=tmp_path / "estoque.db")
    service, notifier = _service(store)
    content = b'{"version": "1.0", "data": {"storage_locations": ["oops"]}}'

    try:
        assert asyncio.run(service.restore_backup(content)) is None
        rows = asyncio.run(store.select_all("storage_locations"))
    finally:
        asyncio.run(store.close())

    assert rows == []
    assert len(notifier.notifications) == 1
    assert notifier.last.title == "Erro ao restaurar backup"
    assert "não são objetos" in notifier.last.description


def test_expiry_report_skips_dates_it_cannot_read(tmp_path):
    from estoque.store.sqlite import SQLiteStore

    store = SQLiteStore(db_path=tmp_path / "estoque.db")
    service, notifier = _service(store)
    try:
        asyncio.run(store.insert("products", [
            {"produto": "A", "marca": "B", "quantidade": 1, "validade": "01/01/2030"},
            {"produto": "C", "marca": "D", "quantidade": 1, "validade": "2025-01-20"},
        ]))
        artifact = asyncio.run(service.export_report("relatorio_vencimento"))
    finally:
        asyncio.run(store.close())

    assert notifier.last.severity == SUCCESS
    text = artifact.content.decode("utf-8")
    assert '"C"' in text
    assert "01/01/2030" not in text

import json

from tienda_api.logs import LogContext, search_logs


def test_log_context_write_persists_record(db):
    log = LogContext(db, "CREATE_PRODUCTO")
    log.set_entity("producto", 7)
    log.set_payload({"nombre": "Mouse", "precio": 25.5})
    log.set_after({"id": 7, "nombre": "Mouse"})
    log.write("OK")

    total, items = search_logs(db, None, None, None, None, 1, 20)
    assert total == 1
    rec = items[0]
    assert rec["action"] == "CREATE_PRODUCTO"
    assert rec["entity_type"] == "producto"
    assert rec["entity_id"] == "7"
    assert rec["request_id"] == log.request_id
    assert json.loads(rec["payload_json"])["nombre"] == "Mouse"
    assert rec["before_json"] is None
    assert rec["latency_ms"] >= 0


def test_search_filters_and_pages(db):
    for i in range(5):
        log = LogContext(db, "UPDATE_PRODUCTO" if i % 2 else "DELETE_PRODUCTO")
        log.set_payload({"n": f"item-{i}"})
        log.write("OK" if i else "ERROR", None if i else "boom")

    total, items = search_logs(db, None, "UPDATE_PRODUCTO", None, None, 1, 20)
    assert total == 2
    assert {it["action"] for it in items} == {"UPDATE_PRODUCTO"}

    total, items = search_logs(db, "item-0", None, None, None, 1, 20)
    assert total == 1
    assert items[0]["err_msg"] == "boom"

    total, page2 = search_logs(db, None, None, None, None, 2, 2)
    assert total == 5
    assert len(page2) == 2


def test_write_failure_does_not_raise(db, caplog):
    db.close()
    log = LogContext(db, "DELETE_PRODUCTO")
    log.write("OK")
    assert "operation_log write failed" in caplog.text


def test_operation_log_columns(db):
    cols = [r["name"] for r in db.query_all("PRAGMA table_info(operation_log)")]
    assert "user" not in cols
    assert cols[:3] == ["id", "ts", "action"]

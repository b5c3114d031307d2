from attendance_app.exceptions import SheetsDatastoreError
from attendance_app.extensions import RECONCILER_KEY


def test_register_attendance_end_to_end(client, store, sheets):
    resp = client.post("/api/attendance", json={"eventId": "E1", "documentId": "12345678", "verifiedBy": "qr"})

    assert resp.status_code == 200
    body = resp.get_json()
    assert body["message"] == "Asistencia registrada correctamente"
    assert body["student"]["full_name"] == "Ana Pérez"
    assert body["student"]["document_id"] == "12345678"
    assert store.attendances[0]["verified_by"] == "qr"
    assert sheets.cell("sheet-g1", "G1") == "E1"
    assert sheets.cell("sheet-g1", "G9") == "1"
    assert sheets.cell("sheet-g1", "U9") == "1"


def test_duplicate_registration_is_400(client):
    client.post("/api/attendance", json={"eventId": "E1", "documentId": "12345678"})
    resp = client.post("/api/attendance", json={"eventId": "E1", "documentId": "12345678"})
    assert resp.status_code == 400
    assert "error" in resp.get_json()


def test_missing_event_or_student_is_404(client):
    assert client.post("/api/attendance", json={"eventId": "X", "documentId": "12345678"}).status_code == 404
    assert client.post("/api/attendance", json={"eventId": "E1", "documentId": "1"}).status_code == 404


def test_missing_fields_is_400(client):
    assert client.post("/api/attendance", json={"eventId": "E1"}).status_code == 400


def test_store_failure_is_500(client, store):
    store.fail_insert = RuntimeError("db down")
    resp = client.post("/api/attendance", json={"eventId": "E1", "documentId": "12345678"})
    assert resp.status_code == 500
    assert resp.get_json() == {"error": "db down"}


def test_sheet_failure_is_invisible_to_student(client, store, sheets):
    sheets.fail_reads.update({"sheet-g1", "sheet-g2"})
    resp = client.post("/api/attendance", json={"eventId": "E1", "documentId": "12345678"})
    assert resp.status_code == 200
    assert len(store.attendances) == 1


def test_unconfigured_mirror_is_invisible_to_student(client, app, store):
    app.extensions.pop(RECONCILER_KEY)
    app.config["GOOGLE_SHEET_ID_GRUPO2"] = ""
    resp = client.post("/api/attendance", json={"eventId": "E1", "documentId": "12345678"})
    assert resp.status_code == 200
    assert len(store.attendances) == 1


def test_student_not_on_any_roster_still_registers(client, store, sheets):
    resp = client.post("/api/attendance", json={"eventId": "E1", "documentId": "99999999"})
    assert resp.status_code == 200
    assert sheets.writes == []


def test_direct_write(client, sheets):
    resp = client.post(
        "/api/attendance-fix", json={"eventId": "E7", "documentId": "44444444", "studentName": "Marta"}
    )
    assert resp.status_code == 200
    body = resp.get_json()
    assert body["success"] is True
    assert body["location"] == "GRUPO2, Celda G9"
    assert "Marta" in body["message"]
    assert sheets.cell("sheet-g2", "G1") == "E7"


def test_direct_write_not_found(client, sheets):
    resp = client.post("/api/attendance-fix", json={"eventId": "E7", "documentId": "00000000"})
    assert resp.status_code == 404
    assert "00000000" in resp.get_json()["error"]
    assert sheets.writes == []


def test_direct_write_transport_failure(client, sheets):
    sheets.fail_reads.update({"sheet-g1", "sheet-g2"})
    resp = client.post("/api/attendance-fix", json={"eventId": "E7", "documentId": "44444444"})
    assert resp.status_code == 500
    assert "Quota exceeded" in resp.get_json()["error"]


def test_test_sheets_report(client, sheets):
    body = client.get("/api/test-sheets").get_json()
    assert body["auth"]["privateKeyConfigured"] is True
    assert body["sheets"]["GRUPO1"] == {"access": True, "title": "Asistencia", "sheets": ["ASISTENCIA"]}
    sample = body["students"][0]
    assert sample["group"] == "GRUPO1"
    assert sample["sample"][1] == {
        "code": "C009",
        "program": "INGENIERIA",
        "name": "Estudiante 9",
        "document": "12345678",
    }


def test_test_sheets_reports_inaccessible_group(client, sheets):
    del sheets.sheets["sheet-g2"]
    body = client.get("/api/test-sheets").get_json()
    assert body["sheets"]["GRUPO2"]["access"] is False
    assert [s["group"] for s in body["students"]] == ["GRUPO1"]


def test_healthz(client):
    assert client.get("/healthz").data == b"ok"

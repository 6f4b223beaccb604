from budget_dashboard.models import Action, Activity, ImportRecord, Program

from conftest import HEADER, build_xlsx_bytes

XLSX = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def _upload(client, filename, content):
    return client.post("/api/import/budget", files={"file": (filename, content, XLSX)})


def test_health(client):
    response = client.get("/api/health")

    assert response.status_code == 200
    assert response.json()["status"] == "ok"


def test_import_budget_and_history(client, db):
    raw = build_xlsx_bytes(
        {
            "PROGRAMME 118": [
                HEADER,
                ["", "Activité X", "", "", "DeptA", "612024", "Some label", "1000", "800", "500"],
            ]
        }
    )

    response = _upload(client, "Budget_2024_final.xlsx", raw)

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["count"] == 1
    assert body["fiscal_year"] == 2024
    assert body["error"] is None

    history = client.get("/api/import/history").json()
    assert history[0]["filename"] == "Budget_2024_final.xlsx"
    assert history[0]["status"] == "SUCCESS"
    assert history[0]["lines_inserted"] == 1


def test_failed_import_is_reported_in_body(client, db):
    response = _upload(client, "budget.xlsx", b"garbage")

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is False
    assert body["error"] == "No valid budget lines found in file."
    assert db.query(ImportRecord).one().status == "FAILED"


def test_empty_upload_is_422(client):
    response = _upload(client, "budget.xlsx", b"")

    assert response.status_code == 422


def test_budget_line_endpoints(client, db):
    program = Program(code="118", name="PROGRAMME 118")
    db.add(program)
    db.flush()
    action = Action(program_id=program.id, code="01", name="Pilotage")
    db.add(action)
    db.flush()
    activity = Activity(action_id=action.id, code="01", name="Études")
    db.add(activity)
    db.commit()

    created = client.post(
        "/api/budget-lines",
        json={"activity_id": activity.id, "paragraph_code": "612024", "ae": 1000, "cp": 800},
    )
    assert created.status_code == 201
    line_id = created.json()["id"]

    rejected = client.patch(f"/api/budget-lines/{line_id}/engagement", json={"engaged": 1500})
    assert rejected.status_code == 422
    assert "cannot exceed authorized amount" in rejected.json()["detail"]

    accepted = client.patch(f"/api/budget-lines/{line_id}/engagement", json={"engaged": 600})
    assert accepted.status_code == 200
    assert accepted.json()["engaged"] == 600

    updated = client.put(
        f"/api/budget-lines/{line_id}", json={"ae": 2000, "cp": 1500, "engaged": 600}
    )
    assert updated.json()["ae"] == 2000

    engagement = client.post(
        "/api/budget-lines/engagements",
        json={
            "activity_id": activity.id,
            "description": "Contrat de nettoyage",
            "amount": 300,
            "paragraph_code": "615100",
        },
    )
    assert engagement.status_code == 201
    assert engagement.json()["engaged"] == 0

    assert client.delete(f"/api/budget-lines/{line_id}").status_code == 200
    assert client.delete(f"/api/budget-lines/{line_id}").status_code == 404

    refused = client.delete(f"/api/programs/{program.id}")
    assert refused.status_code == 409


def test_invalid_paragraph_code_is_rejected_by_schema(client):
    response = client.post(
        "/api/budget-lines",
        json={"activity_id": 1, "paragraph_code": "61A024", "ae": 1, "cp": 1},
    )

    assert response.status_code == 422


def test_program_endpoints(client):
    created = client.post("/api/programs", json={"code": "205", "name": "Affaires maritimes"})
    assert created.status_code == 201
    program_id = created.json()["id"]

    renamed = client.put(f"/api/programs/{program_id}", json={"name": "Mer"})
    assert renamed.json() == {"id": program_id, "code": "205", "name": "Mer"}

    assert client.delete(f"/api/programs/{program_id}").status_code == 200
    assert client.put(f"/api/programs/{program_id}", json={"name": "x"}).status_code == 404

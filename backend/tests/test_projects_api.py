from datetime import datetime, timezone

import pytest

from app.domain.projects.service import project_code


def _budget(client, headers, service_type="production", details=None):
    payload = {
        "client": {"name": "Marina Lopes", "notes": "Prefere contato à tarde"},
        "serviceType": service_type,
        "serviceDetails": details or {},
    }
    response = client.post("/v1/budgets", json=payload, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()


def _start(client, headers, budget_id):
    response = client.post(
        f"/v1/budgets/{budget_id}/project",
        json={"architect": "Carla", "squad": "Squad A", "dueDate": "2026-12-01"},
        headers=headers,
    )
    assert response.status_code == 201, response.text
    return response.json()


def _advance(client, headers, project_id, hours=2.0, description="etapa concluída"):
    return client.post(
        f"/v1/projects/{project_id}/advance",
        json={"hours": hours, "description": description},
        headers=headers,
    )


def test_project_code_format():
    assert project_code(7, datetime(2025, 3, 14, tzinfo=timezone.utc)) == "007_3_25"
    assert project_code(123, datetime(2030, 11, 1, tzinfo=timezone.utc)) == "123_11_30"


def test_start_project_copies_budget_values(client, org_headers):
    budget = _budget(client, org_headers)
    project = _start(client, org_headers, budget["budgetId"])

    now = datetime.now(timezone.utc)
    assert project["code"] == f"001_{now.month}_{now.year % 100:02d}"
    assert project["budgetCode"] == "PROP-001"
    assert project["clientName"] == "Marina Lopes"
    assert project["notes"] == "Prefere contato à tarde"
    assert project["value"] == budget["calculation"]["priceWithDiscount"]
    assert project["estimatedHours"] == budget["calculation"]["estimatedHours"]
    assert project["currentStage"] == "pagamento"
    assert project["status"] == "em_andamento"
    assert project["serviceSummary"] == "1 ambiente(s)"
    assert project["dueDate"] == "2026-12-01"
    assert project["loggedHours"] == 0
    assert project["entries"] == []


def test_start_project_twice_conflicts(client, org_headers):
    budget = _budget(client, org_headers)
    _start(client, org_headers, budget["budgetId"])
    response = client.post(
        f"/v1/budgets/{budget['budgetId']}/project", json={"architect": "Carla"}, headers=org_headers
    )
    assert response.status_code == 409
    assert response.json()["type"].endswith("conflict")


def test_start_project_for_other_org_budget_is_not_found(client, org_headers, other_org_headers):
    budget = _budget(client, org_headers)
    response = client.post(
        f"/v1/budgets/{budget['budgetId']}/project", json={"architect": "Carla"}, headers=other_org_headers
    )
    assert response.status_code == 404


def test_advance_production_to_terminal_stage(client, org_headers):
    budget = _budget(client, org_headers)
    project = _start(client, org_headers, budget["budgetId"])

    stages = []
    for _ in range(4):
        response = _advance(client, org_headers, project["projectId"])
        assert response.status_code == 200
        stages.append(response.json()["currentStage"])

    body = response.json()
    assert stages == ["questionario_briefing", "reuniao_briefing", "dia_producao", "finalizado"]
    assert body["status"] == "finalizado"
    assert body["completedAt"]
    assert body["loggedHours"] == pytest.approx(8.0)
    assert body["hoursVariance"] == pytest.approx(0.0)
    assert [entry["stageId"] for entry in body["entries"]] == [
        "pagamento",
        "questionario_briefing",
        "reuniao_briefing",
        "dia_producao",
    ]

    response = _advance(client, org_headers, project["projectId"])
    assert response.status_code == 409
    assert response.json()["title"] == "Invalid Project Stage Transition"


def test_advance_past_last_stage_finishes_design_project(client, org_headers):
    budget = _budget(client, org_headers, "design", {"projectArea": 40, "projectType": "renovation"})
    project = _start(client, org_headers, budget["budgetId"])
    assert project["serviceSummary"] == "Reforma - 40m²"

    for _ in range(8):
        assert _advance(client, org_headers, project["projectId"], hours=1).json()["status"] == "em_andamento"

    body = _advance(client, org_headers, project["projectId"], hours=3).json()
    assert body["status"] == "finalizado"
    assert body["currentStage"] == "entrega_final"
    assert body["loggedHours"] == pytest.approx(11.0)
    assert body["hoursVariance"] == pytest.approx(11.0 - budget["calculation"]["estimatedHours"])


def test_advance_rejects_negative_hours(client, org_headers):
    budget = _budget(client, org_headers)
    project = _start(client, org_headers, budget["budgetId"])
    response = _advance(client, org_headers, project["projectId"], hours=-1)
    assert response.status_code == 422
    assert response.json()["errors"][0]["field"] == "hours"


def test_list_and_get_projects(client, org_headers):
    first = _start(client, org_headers, _budget(client, org_headers)["budgetId"])
    second = _start(client, org_headers, _budget(client, org_headers)["budgetId"])
    for _ in range(4):
        _advance(client, org_headers, second["projectId"])

    assert [item["projectId"] for item in client.get("/v1/projects", headers=org_headers).json()] == [
        first["projectId"],
        second["projectId"],
    ]
    finished = client.get("/v1/projects", params={"status": "finalizado"}, headers=org_headers).json()
    assert [item["projectId"] for item in finished] == [second["projectId"]]

    response = client.get(f"/v1/projects/{first['projectId']}", headers=org_headers)
    assert response.status_code == 200
    assert response.json()["code"].startswith("001_")
    assert client.get("/v1/projects/missing", headers=org_headers).status_code == 404


@pytest.mark.parametrize(
    "service_type, modality, count, first, last",
    [
        ("decoration", "in_person", 15, "formulario", "pesquisa_satisfacao"),
        ("decoration", "online", 12, "formulario", "pesquisa_satisfacao"),
        ("production", "online", 5, "pagamento", "finalizado"),
        ("design", "in_person", 9, "pagamento", "entrega_final"),
    ],
)
def test_stage_lists(client, service_type, modality, count, first, last):
    response = client.get(f"/v1/projects/stages/{service_type}", params={"modality": modality})
    assert response.status_code == 200
    stages = response.json()
    assert len(stages) == count
    assert stages[0]["id"] == first
    assert stages[-1]["id"] == last


def test_online_decoration_skips_site_stages(client):
    stages = client.get("/v1/projects/stages/decoration").json()
    ids = {stage["id"] for stage in stages}
    assert not ids & {"visita_tecnica", "gerenciamento", "montagem_final"}

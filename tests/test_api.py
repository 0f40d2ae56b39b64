"""
HTTP surface, with the database dependency pointed at SQLite.
"""
import uuid

from lead_qualifier.models.scoring import ScoringModel


def org_headers(org_id):
    return {"X-Organization-ID": str(org_id)}


async def test_health(client):
    response = await client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


async def test_organization_header_required(client):
    response = await client.get("/api/scoring/model")
    assert response.status_code == 422


async def test_organization_header_must_be_uuid(client):
    response = await client.get("/api/scoring/model", headers={"X-Organization-ID": "acme"})
    assert response.status_code == 400


async def test_qualify_unknown_lead(client, org_id):
    response = await client.post(f"/api/leads/{uuid.uuid4()}/qualify", headers=org_headers(org_id))
    assert response.status_code == 404


async def test_qualify_lead(client, org_id, lead_factory):
    lead = await lead_factory(org_id, job_title="Chief Executive Officer", company_name="Acme")

    response = await client.post(f"/api/leads/{lead.id}/qualify", headers=org_headers(org_id))

    assert response.status_code == 200
    body = response.json()
    assert 0 <= body["score"] <= 100
    assert body["label"] in ("hot", "warm", "cold")
    assert body["model_version"] is None
    assert body["breakdown"]["Authority"]["score"] == 100


async def test_qualify_with_corrupt_model(client, org_id, lead_factory, session_maker):
    lead = await lead_factory(org_id)
    async with session_maker() as session:
        session.add(ScoringModel(org_id=org_id, model_version=1, feature_weights={}))
        await session.commit()

    response = await client.post(f"/api/leads/{lead.id}/qualify", headers=org_headers(org_id))

    assert response.status_code == 503
    assert "v1" in response.json()["detail"]


async def test_record_and_list_outcomes(client, org_id, lead_factory):
    lead = await lead_factory(org_id)

    response = await client.post(
        f"/api/leads/{lead.id}/outcomes",
        json={"outcome_type": "converted", "outcome_value": 42000, "days_to_outcome": 14},
        headers=org_headers(org_id),
    )
    assert response.status_code == 201
    body = response.json()
    assert body["success"] is True
    assert body["outcome"]["outcome_type"] == "converted"
    assert body["retraining_recommended"] is False
    assert body["retraining_triggered"] is False

    response = await client.get(f"/api/leads/{lead.id}/outcomes", headers=org_headers(org_id))
    assert response.status_code == 200
    assert [o["days_to_outcome"] for o in response.json()] == [14]


async def test_record_outcome_rejects_unknown_type(client, org_id, lead_factory):
    lead = await lead_factory(org_id)
    response = await client.post(
        f"/api/leads/{lead.id}/outcomes",
        json={"outcome_type": "ghosted"},
        headers=org_headers(org_id),
    )
    assert response.status_code == 422


async def test_retrain_without_outcomes(client, org_id):
    response = await client.post("/api/scoring/retrain", headers=org_headers(org_id))
    assert response.status_code == 400
    assert response.json()["detail"]["reason"] == "insufficient_data"


async def test_model_stats_without_model(client, org_id):
    response = await client.get("/api/scoring/model", headers=org_headers(org_id))
    assert response.status_code == 200
    body = response.json()
    assert body["current_model"] is None
    assert body["total_outcomes"] == 0
    assert body["retraining_recommended"] is False


async def test_model_history_and_activation(client, org_id):
    response = await client.get("/api/scoring/models", headers=org_headers(org_id))
    assert response.json() == {"items": [], "total": 0}

    response = await client.post("/api/scoring/models/3/activate", headers=org_headers(org_id))
    assert response.status_code == 404


async def test_create_and_get_lead(client, org_id):
    response = await client.post(
        "/api/leads/",
        json={"email": "dana@acme.io", "job_title": "VP of Sales", "company_name": "Acme"},
        headers=org_headers(org_id),
    )
    assert response.status_code == 201
    body = response.json()
    assert body["org_id"] == str(org_id)
    assert body["status"] == "new"
    assert body["qualification_status"] == "pending"
    assert body["score"] is None

    response = await client.get(f"/api/leads/{body['id']}", headers=org_headers(org_id))
    assert response.status_code == 200
    assert response.json()["job_title"] == "VP of Sales"

    response = await client.get(f"/api/leads/{body['id']}", headers=org_headers(uuid.uuid4()))
    assert response.status_code == 404


async def test_create_lead_requires_email(client, org_id):
    response = await client.post("/api/leads/", json={"first_name": "Dana"}, headers=org_headers(org_id))
    assert response.status_code == 422


async def test_icp_criteria_lifecycle(client, org_id):
    response = await client.post(
        "/api/icp/criteria",
        json={"name": "Budget", "type": "budget", "weight": 20, "ideal_values": ["$50k-$100k"]},
        headers=org_headers(org_id),
    )
    assert response.status_code == 201
    criterion = response.json()
    assert criterion["type"] == "budget"
    assert criterion["sort_order"] == 0

    response = await client.get("/api/icp/criteria", headers=org_headers(org_id))
    assert [c["name"] for c in response.json()] == ["Budget"]
    response = await client.get("/api/icp/criteria", headers=org_headers(uuid.uuid4()))
    assert response.json() == []

    response = await client.delete(f"/api/icp/criteria/{criterion['id']}", headers=org_headers(org_id))
    assert response.status_code == 204
    response = await client.delete(f"/api/icp/criteria/{criterion['id']}", headers=org_headers(org_id))
    assert response.status_code == 404
    response = await client.get("/api/icp/criteria", headers=org_headers(org_id))
    assert response.json() == []


async def test_icp_criterion_rejects_unknown_type(client, org_id):
    response = await client.post(
        "/api/icp/criteria",
        json={"name": "Region", "type": "geography"},
        headers=org_headers(org_id),
    )
    assert response.status_code == 422


async def test_submitted_lead_qualified_against_icp(client, org_id):
    headers = org_headers(org_id)
    await client.post(
        "/api/icp/criteria",
        json={"name": "Budget", "type": "budget", "ideal_values": ["$50k-$100k"]},
        headers=headers,
    )
    response = await client.post(
        "/api/leads/", json={"email": "dana@acme.io", "budget_range": "$75,000"}, headers=headers
    )
    lead_id = response.json()["id"]

    response = await client.post(f"/api/leads/{lead_id}/qualify", headers=headers)
    assert response.status_code == 200
    result = response.json()
    assert result["breakdown"]["Budget"]["score"] == 100

    response = await client.get(f"/api/leads/{lead_id}", headers=headers)
    body = response.json()
    assert body["qualification_status"] == "qualified"
    assert body["score"] == result["score"]
    assert body["label"] in ("hot", "warm", "cold")

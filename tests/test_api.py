"""Test the HTTP API end to end: applications, requirements, templates and uploads."""

import pytest

PDF_BYTES = b"%PDF-1.4\n1 0 obj\n<< /Type /Catalog >>\nendobj\ntrailer\n<< /Root 1 0 R >>\n%%EOF\n"


async def create_application(client, name="University of Toronto"):
    response = await client.post("/applications", json={"name": name, "institution": "UofT"})
    assert response.status_code == 201
    return response.json()


async def create_requirement(client, application_id, **fields):
    body = {
        "applicationId": application_id,
        "requirementType": "other",
        "category": "academic",
        "name": "Requirement",
    }
    body.update(fields)
    response = await client.post("/requirements", json=body)
    assert response.status_code == 201, response.text
    return response.json()


async def test_health(client):
    response = await client.get("/")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"

    response = await client.get("/health")
    assert response.json()["database"] == "connected"


async def test_create_and_get_application(client):
    application = await create_application(client)

    assert application["progress"] == 0
    assert application["requirementIds"] == []
    assert application["status"] == "draft"

    response = await client.get(f"/applications/{application['id']}")
    assert response.status_code == 200
    assert response.json()["name"] == "University of Toronto"


async def test_missing_application_renders_problem_details(client):
    response = await client.get("/applications/missing")

    assert response.status_code == 404
    assert response.headers["content-type"].startswith("application/problem+json")
    body = response.json()
    assert body["title"] == "Not Found"
    assert body["status"] == 404
    assert body["detail"] == "Application not found"
    assert body["instance"] == "/applications/missing"


async def test_request_validation_renders_problem_details(client):
    response = await client.post("/applications", json={"name": ""})

    assert response.status_code == 422
    body = response.json()
    assert body["title"] == "Unprocessable Entity"
    assert body["errors"][0]["field"] == "name"


async def test_requirement_lifecycle(client):
    application = await create_application(client)
    app_id = application["id"]

    transcript = await create_requirement(
        client, app_id,
        requirementType="document", documentType="transcript", name="Transcripts", order=1,
    )
    fee = await create_requirement(
        client, app_id,
        requirementType="fee", category="administrative", name="Application Fee",
        applicationFeeAmount=90, applicationFeeCurrency="cad", order=2,
    )

    assert transcript["status"] == "pending"
    assert transcript["necessity"] == "required"
    assert transcript["details"]["kind"] == "document"
    assert fee["details"] == {
        "kind": "fee",
        "amount": 90.0,
        "currency": "CAD",
        "description": None,
        "paid": False,
        "paidAt": None,
    }

    response = await client.put(f"/requirements/{transcript['id']}/status", json={"status": "completed"})
    assert response.status_code == 200
    assert response.json()["submittedAt"] is not None

    response = await client.get(f"/applications/{app_id}")
    assert response.json()["progress"] == 50
    assert response.json()["requirementsProgress"]["requiredCompleted"] == 1

    response = await client.get(f"/applications/{app_id}/requirements/attention")
    assert [r["name"] for r in response.json()] == ["Application Fee"]

    response = await client.get(f"/applications/{app_id}/requirements/readiness")
    assert response.json()["ready"] is False

    response = await client.patch(f"/requirements/{fee['id']}", json={"applicationFeePaid": True, "status": "completed"})
    assert response.status_code == 200
    assert response.json()["applicationFeePaid"] is True
    assert response.json()["verifiedAt"] is not None

    response = await client.get(f"/applications/{app_id}/requirements/readiness")
    assert response.json() == {
        "applicationId": app_id,
        "ready": True,
        "progress": {
            "total": 2,
            "completed": 2,
            "required": 2,
            "requiredCompleted": 2,
            "optional": 0,
            "optionalCompleted": 0,
            "percentage": 100,
        },
    }

    response = await client.get(f"/requirements/{fee['id']}")
    assert response.status_code == 200
    assert response.json()["application"]["name"] == "University of Toronto"

    response = await client.delete(f"/requirements/{fee['id']}")
    assert response.status_code == 204

    response = await client.get(f"/requirements/{fee['id']}")
    assert response.status_code == 404
    assert response.json()["detail"] == "Requirement not found"

    response = await client.get(f"/applications/{app_id}")
    assert response.json()["requirementIds"] == [transcript["id"]]


async def test_invalid_requirement_is_rejected(client):
    application = await create_application(client)

    response = await client.post("/requirements", json={
        "applicationId": application["id"],
        "requirementType": "document",
        "category": "academic",
        "name": "Transcript",
    })

    assert response.status_code == 422
    assert response.json()["errors"] == [
        {"field": "documentType", "message": "Document type is required for document requirements"}
    ]


async def test_validate_endpoint(client):
    response = await client.post("/requirements/validate", json={
        "requirementType": "test_score",
        "category": "academic",
        "name": "TOEFL",
        "minScore": -5,
    })

    assert response.status_code == 200
    body = response.json()
    assert body["isValid"] is False
    assert {e["field"] for e in body["errors"]} == {"testType", "minScore"}


async def test_illegal_transition_is_a_conflict(client):
    application = await create_application(client)
    requirement = await create_requirement(client, application["id"])

    await client.put(f"/requirements/{requirement['id']}/status", json={"status": "not_applicable"})
    response = await client.put(f"/requirements/{requirement['id']}/status", json={"status": "waived"})

    assert response.status_code == 409
    assert "Cannot change requirement status from not_applicable to waived" in response.json()["detail"]


async def test_list_requirements_with_query_options(client):
    application = await create_application(client)
    app_id = application["id"]
    await create_requirement(client, app_id, name="Essay", category="personal", order=2)
    await create_requirement(client, app_id, name="GRE", requirementType="test_score", testType="gre", order=1)
    await create_requirement(client, app_id, name="Budget", category="financial", order=3, isRequired=False)

    response = await client.get(f"/applications/{app_id}/requirements")
    assert [r["name"] for r in response.json()] == ["GRE", "Essay", "Budget"]

    response = await client.get(
        f"/applications/{app_id}/requirements",
        params={"category": ["personal", "financial"], "sortBy": "name"},
    )
    assert [r["name"] for r in response.json()] == ["Budget", "Essay"]

    response = await client.get(f"/applications/{app_id}/requirements", params={"requirementType": "test_score"})
    assert [r["name"] for r in response.json()] == ["GRE"]

    response = await client.get(f"/applications/{app_id}/requirements", params={"isRequired": "false"})
    assert [r["name"] for r in response.json()] == ["Budget"]

    response = await client.get(f"/applications/{app_id}/requirements", params={"sortBy": "bogus"})
    assert response.status_code == 422


async def test_progress_summary_and_recalculation(client):
    application = await create_application(client)
    app_id = application["id"]
    essay = await create_requirement(client, app_id, name="Essay", category="personal")
    await create_requirement(client, app_id, name="Visit", category="personal", isRequired=False, isOptional=True)
    await client.put(f"/requirements/{essay['id']}/status", json={"status": "completed"})

    response = await client.get(f"/applications/{app_id}/requirements/progress")
    assert response.status_code == 200
    summary = response.json()
    assert summary["totalRequirements"] == 2
    assert summary["completedRequirements"] == 1
    assert summary["requiredPercentage"] == 100
    assert summary["progressPercentage"] == 50
    assert summary["requirementsByCategory"]["personal"]["total"] == 2
    assert summary["requirementsByType"]["other"]["completed"] == 1
    assert summary["byStatus"] == {
        "pending": 1,
        "in_progress": 0,
        "completed": 1,
        "waived": 0,
        "not_applicable": 0,
    }

    response = await client.post(f"/applications/{app_id}/requirements/progress")
    assert response.status_code == 200
    assert response.json()["percentage"] == 50


async def test_bulk_update(client):
    application = await create_application(client)
    app_id = application["id"]
    first = await create_requirement(client, app_id, name="First")
    second = await create_requirement(client, app_id, name="Second")

    response = await client.patch("/requirements/bulk", json={
        "requirementIds": [first["id"], second["id"]],
        "patch": {"status": "waived", "notes": "Waived for alumni"},
    })

    assert response.status_code == 200
    assert response.json() == {"updated": 2, "applicationIds": [app_id]}

    response = await client.get(f"/applications/{app_id}")
    assert response.json()["progress"] == 100

    response = await client.patch("/requirements/bulk", json={
        "requirementIds": ["missing"],
        "patch": {"notes": "x"},
    })
    assert response.status_code == 400
    assert response.json()["detail"] == "No requirements were updated"


async def test_patch_rejects_invalid_values_and_keeps_the_row(client):
    application = await create_application(client)
    requirement = await create_requirement(client, application["id"], name="Transcript")
    url = f"/requirements/{requirement['id']}"

    for body, field in [
        ({"name": None}, "name"),
        ({"name": "   "}, "name"),
        ({"isRequired": None}, "isRequired"),
        ({"order": None}, "order"),
    ]:
        response = await client.patch(url, json=body)
        assert response.status_code == 422, body
        assert response.json()["errors"][0]["field"] == field

    response = await client.patch(url, json={"isRequired": True, "isOptional": True})
    assert response.status_code == 422
    assert response.json()["errors"] == [
        {"field": "isOptional", "message": "A requirement cannot be both required and optional"}
    ]

    response = await client.get(url)
    body = response.json()
    assert body["name"] == "Transcript"
    assert body["isRequired"] is True
    assert body["isOptional"] is False
    assert body["order"] == 0


async def test_bulk_update_rejects_invalid_patch(client):
    application = await create_application(client)
    first = await create_requirement(client, application["id"], name="First")
    second = await create_requirement(
        client, application["id"], name="Second", isRequired=False, isOptional=True
    )
    ids = [first["id"], second["id"]]

    response = await client.patch("/requirements/bulk", json={"requirementIds": ids, "patch": {"isRequired": None}})
    assert response.status_code == 422
    assert response.json()["errors"][0]["field"] == "patch.isRequired"

    response = await client.patch("/requirements/bulk", json={"requirementIds": ids, "patch": {"isRequired": True}})
    assert response.status_code == 422
    assert response.json()["errors"][0]["field"] == "isOptional"

    response = await client.get(f"/requirements/{second['id']}")
    assert response.json()["isRequired"] is False
    assert response.json()["isOptional"] is True


async def test_tasks_are_resolved_on_requirements(client):
    application = await create_application(client)
    app_id = application["id"]
    requirement = await create_requirement(client, app_id, name="Recommendation")

    response = await client.post(f"/applications/{app_id}/tasks", json={"title": "Email Prof. Smith"})
    assert response.status_code == 201
    task_id = response.json()["id"]

    response = await client.patch(f"/requirements/{requirement['id']}", json={"taskId": task_id})
    assert response.status_code == 200
    assert response.json()["task"]["title"] == "Email Prof. Smith"

    response = await client.get(f"/applications/{app_id}/tasks")
    assert [t["title"] for t in response.json()] == ["Email Prof. Smith"]


# ---------------------------------------------------------------------------
# Documents and uploads
# ---------------------------------------------------------------------------

async def test_library_upload_rejects_duplicates(client):
    files = {"file": ("cv.pdf", PDF_BYTES, "application/pdf")}
    response = await client.post("/documents", files=files, data={"documentType": "cv", "title": "My CV"})

    assert response.status_code == 201
    document = response.json()
    assert document["title"] == "My CV"
    assert document["documentType"] == "cv"
    assert document["fileExtension"] == "pdf"

    response = await client.get(f"/documents/{document['id']}")
    assert response.json()["sha256"] == document["sha256"]

    response = await client.post("/documents", files={"file": ("cv-copy.pdf", PDF_BYTES, "application/pdf")})
    assert response.status_code == 409
    assert document["sha256"] in response.json()["detail"]


async def test_link_document_endpoint(client):
    application = await create_application(client)
    requirement = await create_requirement(
        client, application["id"], requirementType="document", documentType="cv", name="CV",
    )
    response = await client.post("/documents", files={"file": ("cv.pdf", PDF_BYTES, "application/pdf")})
    document_id = response.json()["id"]

    response = await client.post(
        f"/requirements/{requirement['id']}/link-document",
        json={"documentId": document_id, "notes": "Latest version"},
    )

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "completed"
    assert body["linkedDocument"]["id"] == document_id
    assert body["notes"] == "Latest version"

    response = await client.post(
        f"/requirements/{requirement['id']}/link-document", json={"documentId": "missing"}
    )
    assert response.status_code == 404
    assert response.json()["detail"] == "Document not found"


async def test_upload_for_requirement_links_and_reuses_files(client):
    application = await create_application(client)
    app_id = application["id"]
    transcript = await create_requirement(
        client, app_id, requirementType="document", documentType="transcript",
        name="Transcript", allowedFileTypes=["pdf"], maxFileSize=1,
    )
    copy = await create_requirement(
        client, app_id, requirementType="document", documentType="transcript", name="Transcript copy",
    )

    response = await client.post(
        f"/requirements/{transcript['id']}/documents",
        files={"file": ("transcript.pdf", PDF_BYTES, "application/pdf")},
    )
    assert response.status_code == 201
    first = response.json()
    assert first["status"] == "completed"
    assert first["linkedDocument"]["documentType"] == "transcript"

    response = await client.post(
        f"/requirements/{copy['id']}/documents",
        files={"file": ("again.pdf", PDF_BYTES, "application/pdf")},
    )
    assert response.status_code == 201
    assert response.json()["linkedDocumentId"] == first["linkedDocumentId"]

    response = await client.get(f"/applications/{app_id}")
    assert response.json()["progress"] == 100


async def test_upload_checks_requirement_limits(client):
    application = await create_application(client)
    requirement = await create_requirement(
        client, application["id"], requirementType="document", documentType="transcript",
        name="Transcript", allowedFileTypes=["pdf"], maxFileSize=0.00001,
    )

    response = await client.post(
        f"/requirements/{requirement['id']}/documents",
        files={"file": ("scan.png", b"\x89PNG\r\n", "image/png")},
    )
    assert response.status_code == 400
    assert "not allowed" in response.json()["detail"]

    response = await client.post(
        f"/requirements/{requirement['id']}/documents",
        files={"file": ("transcript.pdf", PDF_BYTES, "application/pdf")},
    )
    assert response.status_code == 413

    response = await client.get(f"/requirements/{requirement['id']}")
    assert response.json()["status"] == "pending"


# ---------------------------------------------------------------------------
# Templates
# ---------------------------------------------------------------------------

async def seed(client):
    response = await client.post("/requirements-templates/system")
    assert response.status_code == 200
    return {t["name"]: t for t in response.json()}


async def test_seed_and_apply_scholarship_template(client):
    templates = await seed(client)
    assert set(templates) == {"Graduate School Application", "Undergraduate Application", "Scholarship Application"}
    scholarship = templates["Scholarship Application"]
    assert scholarship["isSystemTemplate"] is True
    assert len(scholarship["requirements"]) == 5

    response = await client.post("/requirements-templates/system")
    assert response.json() == []

    application = await create_application(client, "Rhodes Scholarship")
    response = await client.post(
        f"/requirements-templates/{scholarship['id']}/apply",
        json={"applicationId": application["id"]},
    )
    assert response.status_code == 201
    body = response.json()
    assert body["requirementsCreated"] == 5
    assert body["requirements"][0]["name"] == "Scholarship Essay"
    assert body["requirements"][0]["details"]["wordLimit"] == 500

    response = await client.get(f"/requirements-templates/{scholarship['id']}")
    assert response.json()["usageCount"] == 1

    response = await client.get(f"/applications/{application['id']}/requirements/readiness")
    assert response.json()["progress"]["total"] == 5
    assert response.json()["progress"]["percentage"] == 0


async def test_system_template_cannot_be_deleted(client):
    templates = await seed(client)
    graduate = templates["Graduate School Application"]

    response = await client.delete(f"/requirements-templates/{graduate['id']}")
    assert response.status_code == 409
    assert "Cannot delete system templates" in response.json()["detail"]

    response = await client.put(f"/requirements-templates/{graduate['id']}", json={"name": "Mine now"})
    assert response.status_code == 409

    response = await client.get(f"/requirements-templates/{graduate['id']}")
    assert response.json()["name"] == "Graduate School Application"


async def test_user_template_crud(client):
    response = await client.post("/users", json={"name": "Dana", "email": "Dana@Example.com"})
    assert response.status_code == 201
    user_id = response.json()["id"]

    response = await client.post(
        "/requirements-templates",
        headers={"X-User-Id": user_id},
        json={
            "name": "Law School",
            "description": "JD programs",
            "category": "custom",
            "tags": ["law", "LSAT"],
            "requirements": [
                {"requirementType": "test_score", "category": "academic", "name": "LSAT",
                 "testType": "other", "minScore": 120, "maxScore": 180, "order": 2},
                {"requirementType": "document", "category": "personal", "name": "Personal Statement",
                 "documentType": "personal_statement", "wordLimit": 700, "order": 1},
            ],
        },
    )
    assert response.status_code == 201, response.text
    template = response.json()
    assert template["creator"] == {"id": user_id, "name": "Dana", "email": "dana@example.com"}
    assert [r["name"] for r in template["requirements"]] == ["Personal Statement", "LSAT"]

    response = await client.get("/requirements-templates", params={"createdBy": user_id})
    assert [t["name"] for t in response.json()] == ["Law School"]

    response = await client.get("/requirements-templates/search", params={"q": "lsat"})
    assert [t["name"] for t in response.json()] == ["Law School"]

    response = await client.get("/requirements-templates/category/custom")
    assert [t["name"] for t in response.json()] == ["Law School"]

    response = await client.put(f"/requirements-templates/{template['id']}", json={"isActive": False})
    assert response.status_code == 200
    assert response.json()["isActive"] is False

    application = await create_application(client)
    response = await client.post(
        f"/requirements-templates/{template['id']}/apply", json={"applicationId": application["id"]}
    )
    assert response.status_code == 409
    assert response.json()["detail"] == "Template is not active"

    response = await client.delete(f"/requirements-templates/{template['id']}")
    assert response.status_code == 204

    response = await client.get(f"/requirements-templates/{template['id']}")
    assert response.status_code == 404


async def test_create_template_validation_errors(client):
    response = await client.post("/requirements-templates", json={"name": "Empty", "category": "custom"})

    assert response.status_code == 422
    assert response.json()["detail"] == "Template must have at least one requirement"


async def test_template_statistics_and_popular(client):
    templates = await seed(client)
    application = await create_application(client)
    await client.post(
        f"/requirements-templates/{templates['Undergraduate Application']['id']}/apply",
        json={"applicationId": application["id"]},
    )

    response = await client.get("/requirements-templates/statistics")
    assert response.status_code == 200
    assert response.json() == {
        "totalTemplates": 3,
        "systemTemplates": 3,
        "userTemplates": 0,
        "activeTemplates": 3,
        "totalUsage": 1,
        "templatesByCategory": {"graduate": 1, "undergraduate": 1, "scholarship": 1, "custom": 0},
    }

    response = await client.get("/requirements-templates/popular", params={"limit": 1})
    assert [t["name"] for t in response.json()] == ["Undergraduate Application"]


@pytest.mark.parametrize("path", ["/requirements-templates/missing", "/requirements/missing"])
async def test_unknown_ids_are_not_found(client, path):
    response = await client.get(path)
    assert response.status_code == 404

"""Project, milestone and task endpoints with client/admin scoping."""

import pytest

from tests.conftest import bearer


async def _create_project(client, token, client_id, **extra):
    response = await client.post(
        "/api/projects",
        headers=bearer(token),
        json={"title": "Website Redesign", "clientId": client_id, **extra},
    )
    assert response.status_code == 201, response.text
    return response.json()


async def _create_task(client, token, project_id, **extra):
    response = await client.post(
        f"/api/projects/{project_id}/tasks",
        headers=bearer(token),
        json={"title": "Build homepage", **extra},
    )
    assert response.status_code == 201, response.text
    return response.json()


@pytest.mark.asyncio
async def test_admin_creates_project_with_defaults(client, super_admin_token, test_client_auth):
    project = await _create_project(client, super_admin_token, test_client_auth.id)

    assert project["status"] == "active"
    assert project["priority"] == "medium"
    assert project["progress"] == 0
    assert project["completedAt"] is None


@pytest.mark.asyncio
async def test_create_project_for_unknown_client(client, super_admin_token):
    response = await client.post(
        "/api/projects",
        headers=bearer(super_admin_token),
        json={"title": "Orphan", "clientId": "missing"},
    )
    assert response.status_code == 400
    assert response.json() == {"message": "Client not found"}


@pytest.mark.asyncio
async def test_clients_only_see_their_own_projects(
    client, super_admin_token, test_client_auth, other_client_auth
):
    mine = await _create_project(client, super_admin_token, test_client_auth.id)
    theirs = await _create_project(client, super_admin_token, other_client_auth.id, title="SEO")

    listed = await client.get("/api/projects", headers=test_client_auth.headers)
    assert listed.status_code == 200
    assert [p["id"] for p in listed.json()] == [mine["id"]]

    # Another client's project looks like it does not exist
    hidden = await client.get(f"/api/projects/{theirs['id']}", headers=test_client_auth.headers)
    assert hidden.status_code == 404
    assert hidden.json() == {"message": "Project not found"}


@pytest.mark.asyncio
async def test_client_id_filter_ignored_for_clients(
    client, super_admin_token, test_client_auth, other_client_auth
):
    await _create_project(client, super_admin_token, other_client_auth.id)

    response = await client.get(
        "/api/projects",
        params={"clientId": other_client_auth.id},
        headers=test_client_auth.headers,
    )
    assert response.json() == []


@pytest.mark.asyncio
async def test_admin_lists_projects_newest_first_and_filters(
    client, super_admin_token, test_client_auth, other_client_auth
):
    first = await _create_project(client, super_admin_token, test_client_auth.id, title="First")
    second = await _create_project(client, super_admin_token, test_client_auth.id, title="Second")
    await _create_project(client, super_admin_token, other_client_auth.id, title="Elsewhere")

    response = await client.get(
        "/api/projects",
        params={"clientId": test_client_auth.id},
        headers=bearer(super_admin_token),
    )
    assert [p["id"] for p in response.json()] == [second["id"], first["id"]]


@pytest.mark.asyncio
async def test_clients_cannot_create_or_delete_projects(client, super_admin_token, test_client_auth):
    create = await client.post(
        "/api/projects",
        headers=test_client_auth.headers,
        json={"title": "Mine", "clientId": test_client_auth.id},
    )
    assert create.status_code == 403

    project = await _create_project(client, super_admin_token, test_client_auth.id)
    delete = await client.delete(f"/api/projects/{project['id']}", headers=test_client_auth.headers)
    assert delete.status_code == 403


@pytest.mark.asyncio
async def test_moderator_cannot_touch_projects(client, moderator_token, test_client_auth):
    response = await client.get("/api/projects", headers=bearer(moderator_token))
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_completing_task_updates_progress_and_completed_at(
    client, super_admin_token, test_client_auth
):
    project = await _create_project(client, super_admin_token, test_client_auth.id)
    task = await _create_task(client, super_admin_token, project["id"])
    await _create_task(client, super_admin_token, project["id"], title="Write copy")

    before = await client.get(f"/api/projects/{project['id']}", headers=test_client_auth.headers)
    assert before.json()["progress"] == 0

    # Clients may update tasks on their own projects
    updated = await client.put(
        f"/api/tasks/{task['id']}",
        headers=test_client_auth.headers,
        json={"status": "completed"},
    )
    assert updated.status_code == 200
    assert updated.json()["completedAt"] is not None

    after = await client.get(f"/api/projects/{project['id']}", headers=test_client_auth.headers)
    assert after.json()["progress"] == 50

    reopened = await client.put(
        f"/api/tasks/{task['id']}",
        headers=bearer(super_admin_token),
        json={"status": "in_progress"},
    )
    assert reopened.json()["completedAt"] is None


@pytest.mark.asyncio
async def test_project_completion_sets_completed_at(client, super_admin_token, test_client_auth):
    project = await _create_project(client, super_admin_token, test_client_auth.id)

    done = await client.put(
        f"/api/projects/{project['id']}",
        headers=bearer(super_admin_token),
        json={"status": "completed"},
    )
    assert done.status_code == 200
    stamped = done.json()["completedAt"]
    assert stamped is not None

    # Re-sending completed keeps the original stamp
    again = await client.put(
        f"/api/projects/{project['id']}",
        headers=bearer(super_admin_token),
        json={"status": "completed", "title": "Renamed"},
    )
    assert again.json()["completedAt"] == stamped
    assert again.json()["title"] == "Renamed"


@pytest.mark.asyncio
async def test_invalid_status_rejected(client, super_admin_token, test_client_auth):
    project = await _create_project(client, super_admin_token, test_client_auth.id)

    response = await client.put(
        f"/api/projects/{project['id']}",
        headers=bearer(super_admin_token),
        json={"status": "archived"},
    )
    assert response.status_code == 400
    assert response.json()["errors"][0]["field"] == "status"


@pytest.mark.asyncio
async def test_project_detail_includes_children(client, super_admin_token, test_client_auth):
    project = await _create_project(client, super_admin_token, test_client_auth.id)
    milestone = await client.post(
        f"/api/projects/{project['id']}/milestones",
        headers=bearer(super_admin_token),
        json={"title": "Discovery", "order": 1},
    )
    assert milestone.status_code == 201
    await _create_task(
        client, super_admin_token, project["id"], milestoneId=milestone.json()["id"]
    )

    detail = await client.get(f"/api/projects/{project['id']}", headers=bearer(super_admin_token))
    body = detail.json()
    assert [m["title"] for m in body["milestones"]] == ["Discovery"]
    assert body["tasks"][0]["milestoneId"] == milestone.json()["id"]
    assert body["comments"] == []


@pytest.mark.asyncio
async def test_task_milestone_must_belong_to_project(
    client, super_admin_token, test_client_auth, other_client_auth
):
    project = await _create_project(client, super_admin_token, test_client_auth.id)
    other = await _create_project(client, super_admin_token, other_client_auth.id)
    foreign = await client.post(
        f"/api/projects/{other['id']}/milestones",
        headers=bearer(super_admin_token),
        json={"title": "Elsewhere"},
    )

    response = await client.post(
        f"/api/projects/{project['id']}/tasks",
        headers=bearer(super_admin_token),
        json={"title": "Misfiled", "milestoneId": foreign.json()["id"]},
    )
    assert response.status_code == 400
    assert response.json() == {"message": "Milestone does not belong to this project"}


@pytest.mark.asyncio
async def test_list_tasks_filtered_by_milestone(client, super_admin_token, test_client_auth):
    project = await _create_project(client, super_admin_token, test_client_auth.id)
    milestone = (
        await client.post(
            f"/api/projects/{project['id']}/milestones",
            headers=bearer(super_admin_token),
            json={"title": "Launch"},
        )
    ).json()
    scoped = await _create_task(client, super_admin_token, project["id"], milestoneId=milestone["id"])
    await _create_task(client, super_admin_token, project["id"], title="Unscoped")

    response = await client.get(
        f"/api/projects/{project['id']}/tasks",
        params={"milestoneId": milestone["id"]},
        headers=test_client_auth.headers,
    )
    assert [t["id"] for t in response.json()] == [scoped["id"]]


@pytest.mark.asyncio
async def test_deleting_milestone_keeps_tasks(client, storage, super_admin_token, test_client_auth):
    project = await _create_project(client, super_admin_token, test_client_auth.id)
    milestone = (
        await client.post(
            f"/api/projects/{project['id']}/milestones",
            headers=bearer(super_admin_token),
            json={"title": "Launch"},
        )
    ).json()
    task = await _create_task(client, super_admin_token, project["id"], milestoneId=milestone["id"])

    response = await client.delete(
        f"/api/milestones/{milestone['id']}", headers=bearer(super_admin_token)
    )
    assert response.status_code == 204
    assert storage.get_task(task["id"]).milestone_id is None


@pytest.mark.asyncio
async def test_deleting_project_removes_children(client, storage, super_admin_token, test_client_auth):
    project = await _create_project(client, super_admin_token, test_client_auth.id)
    task = await _create_task(client, super_admin_token, project["id"])

    response = await client.delete(f"/api/projects/{project['id']}", headers=bearer(super_admin_token))
    assert response.status_code == 204
    assert storage.get_project(project["id"]) is None
    assert storage.get_task(task["id"]) is None

    missing = await client.get(f"/api/tasks/{task['id']}", headers=bearer(super_admin_token))
    assert missing.status_code == 404

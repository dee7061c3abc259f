from tests.helpers import bearer


def create(client, token, content="buy milk"):
    res = client.post("/api/todos/createusertodo", json={"content": content}, headers=bearer(token))
    assert res.status_code == 200
    return res.get_json()


def test_end_to_end_todo_lifecycle(client, register_and_login):
    token = register_and_login("alice", "pw1")

    todo = create(client, token, "buy milk")
    assert todo["completed"] is False
    assert todo["content"] == "buy milk"
    assert todo["createdAt"]

    res = client.get("/api/todos/getusertodo", headers=bearer(token))
    assert res.status_code == 200
    items = res.get_json()
    assert len(items) == 1
    assert items[0]["content"] == "buy milk"
    assert items[0]["completed"] is False

    res = client.put(f"/api/todos/updateusertodo/{todo['id']}", json={"completed": True}, headers=bearer(token))
    assert res.status_code == 200
    assert res.get_json()["completed"] is True
    assert res.get_json()["content"] == "buy milk"

    res = client.get(f"/api/todos/getusertodo/{todo['id']}", headers=bearer(token))
    assert res.status_code == 200
    assert res.get_json()["completed"] is True

    res = client.delete(f"/api/todos/deleteusertodo/{todo['id']}", headers=bearer(token))
    assert res.status_code == 200
    assert res.get_json()["id"] == todo["id"]

    res = client.get(f"/api/todos/getusertodo/{todo['id']}", headers=bearer(token))
    assert res.status_code == 404


def test_create_requires_content(client, register_and_login):
    token = register_and_login()
    res = client.post("/api/todos/createusertodo", json={}, headers=bearer(token))
    assert res.status_code == 400
    assert "content" in res.get_json()["details"]


def test_todo_owner_comes_from_token(client, register_and_login):
    token = register_and_login()
    me = client.get("/api/user/username", headers=bearer(token))
    assert me.status_code == 200
    res = client.post(
        "/api/todos/createusertodo",
        json={"content": "x", "userId": "someone-else"},
        headers=bearer(token),
    )
    assert res.status_code == 200
    assert res.get_json()["userId"] != "someone-else"


def test_todos_are_isolated_between_users(client, register_and_login):
    alice = register_and_login("alice", "pw1")
    todo = create(client, alice, "alice's secret")
    bob = register_and_login("bob", "pw2")

    assert client.get("/api/todos/getusertodo", headers=bearer(bob)).get_json() == []
    assert client.get(f"/api/todos/getusertodo/{todo['id']}", headers=bearer(bob)).status_code == 404
    res = client.put(f"/api/todos/updateusertodo/{todo['id']}", json={"content": "pwned"}, headers=bearer(bob))
    assert res.status_code == 404
    assert client.delete(f"/api/todos/deleteusertodo/{todo['id']}", headers=bearer(bob)).status_code == 404

    res = client.get(f"/api/todos/getusertodo/{todo['id']}", headers=bearer(alice))
    assert res.status_code == 200
    assert res.get_json()["content"] == "alice's secret"


def test_update_cannot_reassign_owner(client, register_and_login):
    alice = register_and_login("alice", "pw1")
    todo = create(client, alice)
    res = client.put(
        f"/api/todos/updateusertodo/{todo['id']}",
        json={"userId": "other", "content": "renamed"},
        headers=bearer(alice),
    )
    assert res.status_code == 200
    assert res.get_json()["userId"] == todo["userId"]
    assert res.get_json()["content"] == "renamed"


def test_update_missing_todo_leaves_store_unchanged(app, client, storage, register_and_login):
    from models.todo import Todo

    token = register_and_login()
    todo = create(client, token)
    res = client.put("/api/todos/updateusertodo/does-not-exist", json={"completed": True}, headers=bearer(token))
    assert res.status_code == 404

    with app.app_context():
        assert storage.count(Todo) == 1
        assert storage.get(Todo, todo["id"]).completed is False


def test_update_rejects_bad_types(client, register_and_login):
    token = register_and_login()
    todo = create(client, token)
    res = client.put(
        f"/api/todos/updateusertodo/{todo['id']}", json={"completed": "maybe"}, headers=bearer(token)
    )
    assert res.status_code == 400


def test_todo_routes_require_token(client):
    assert client.get("/api/todos/getusertodo").status_code == 401
    assert client.post("/api/todos/createusertodo", json={"content": "x"}).status_code == 401
    assert client.get("/api/todos/getusertodo", headers=bearer("junk")).status_code == 403


def test_list_only_returns_own_todos(client, register_and_login):
    alice = register_and_login("alice", "pw1")
    create(client, alice, "one")
    create(client, alice, "two")
    bob = register_and_login("bob", "pw2")
    create(client, bob, "three")

    contents = {t["content"] for t in client.get("/api/todos/getusertodo", headers=bearer(alice)).get_json()}
    assert contents == {"one", "two"}


def test_created_at_is_stable_between_create_and_get(client, register_and_login):
    token = register_and_login()
    todo = create(client, token)

    res = client.get(f"/api/todos/getusertodo/{todo['id']}", headers=bearer(token))
    assert res.status_code == 200
    assert res.get_json()["createdAt"] == todo["createdAt"]
    assert res.get_json()["updatedAt"] == todo["updatedAt"]
    assert todo["createdAt"].endswith("+00:00")


def test_create_for_vanished_user_is_not_found(app, client):
    from utils.security import create_access_token

    with app.app_context():
        token = create_access_token("no-such-user")
    res = client.post("/api/todos/createusertodo", json={"content": "x"}, headers=bearer(token))
    assert res.status_code == 404
    assert res.get_json()["message"] == "User not found"

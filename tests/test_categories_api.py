#!/usr/bin/env python3
"""
Tests for the categories and departments HTTP API
"""

from bson import ObjectId

from conftest import insert_raw, raw_category


class TestCategoriesAPI:
    """Test class for category API endpoints"""

    def setup_method(self):
        self.admin_id = str(ObjectId())
        self.headers = {"X-User-Id": self.admin_id}

    def create(self, client, **data):
        response = client.post("/api/categories/", json=data, headers=self.headers)
        assert response.status_code == 201, response.text
        return response.json()

    def build_chain(self, client):
        spirits = self.create(client, name="Spirits", level=0)
        whiskey = self.create(client, name="Whiskey", level=1, parent=spirits["_id"])
        bourbon = self.create(client, name="Bourbon", level=2, parent=whiskey["_id"])
        return spirits, whiskey, bourbon

    def test_create_category(self, client):
        response = client.post(
            "/api/categories/",
            json={"name": " Spirits ", "level": 0, "sortOrder": 2, "description": "Hard liquor"},
            headers=self.headers
        )

        assert response.status_code == 201
        data = response.json()
        assert data["name"] == "Spirits"
        assert data["level"] == 0
        assert data["parent"] is None
        assert data["sortOrder"] == 2
        assert data["isActive"] is True
        assert data["createdBy"] == self.admin_id
        assert data["updatedBy"] == self.admin_id
        assert ObjectId.is_valid(data["_id"])
        assert "createdAt" in data and "updatedAt" in data

    def test_create_requires_actor(self, client):
        response = client.post("/api/categories/", json={"name": "Spirits", "level": 0})

        assert response.status_code == 400
        assert "X-User-Id" in response.json()["detail"]

    def test_create_rejects_invalid_actor(self, client):
        response = client.post(
            "/api/categories/",
            json={"name": "Spirits", "level": 0},
            headers={"X-User-Id": "admin"}
        )

        assert response.status_code == 400

    def test_create_category_without_parent(self, client):
        response = client.post("/api/categories/", json={"name": "Whiskey", "level": 1}, headers=self.headers)

        assert response.status_code == 400
        data = response.json()
        assert data["field"] == "parent"
        assert "detail" in data

    def test_create_with_unknown_parent(self, client):
        response = client.post(
            "/api/categories/",
            json={"name": "Whiskey", "level": 1, "parent": str(ObjectId())},
            headers=self.headers
        )

        assert response.status_code == 404
        assert response.json()["field"] == "parent"

    def test_create_with_blank_name(self, client):
        response = client.post("/api/categories/", json={"name": "   ", "level": 0}, headers=self.headers)

        assert response.status_code == 422

    def test_get_category_with_children(self, client):
        drinks = self.create(client, name="Drinks", level=0)
        for name, order in [("Beer", 2), ("Wine", 1), ("Ale", 1)]:
            self.create(client, name=name, level=1, parent=drinks["_id"], sortOrder=order)

        response = client.get(f"/api/categories/{drinks['_id']}")

        assert response.status_code == 200
        data = response.json()
        assert data["name"] == "Drinks"
        assert [child["name"] for child in data["children"]] == ["Ale", "Wine", "Beer"]

    def test_get_unknown_category(self, client):
        response = client.get(f"/api/categories/{ObjectId()}")

        assert response.status_code == 404

    def test_get_invalid_id(self, client):
        response = client.get("/api/categories/not-an-id")

        assert response.status_code == 400
        assert response.json()["field"] == "id"

    def test_children_and_roots(self, client):
        spirits = self.create(client, name="Spirits", level=0)
        self.create(client, name="Wine", level=0, sortOrder=1)
        self.create(client, name="Gin", level=1, parent=spirits["_id"])
        self.create(client, name="Absinthe", level=1, parent=spirits["_id"], isActive=False)

        roots = client.get("/api/categories/roots").json()
        children = client.get(f"/api/categories/{spirits['_id']}/children").json()
        active_children = client.get(f"/api/categories/{spirits['_id']}/children?active_only=true").json()

        assert [r["name"] for r in roots] == ["Spirits", "Wine"]
        assert [c["name"] for c in children] == ["Absinthe", "Gin"]
        assert [c["name"] for c in active_children] == ["Gin"]

    def test_tree(self, client):
        spirits, whiskey, bourbon = self.build_chain(client)
        self.create(client, name="Beer", level=0, isActive=False)

        response = client.get("/api/categories/")

        assert response.status_code == 200
        tree = response.json()
        assert [node["name"] for node in tree] == ["Spirits"]
        assert tree[0]["_id"] == spirits["_id"]
        assert tree[0]["subcategories"][0]["name"] == "Whiskey"
        assert tree[0]["subcategories"][0]["subcategories"][0]["name"] == "Bourbon"
        assert tree[0]["subcategories"][0]["subcategories"][0]["subcategories"] == []

    def test_long_name_create_and_list(self, client, mock_db):
        name = ("Kentucky Straight Bourbon " * 6).strip()
        created = self.create(client, name=name, level=0)
        insert_raw(mock_db, raw_category("Reserve " * 20, 0, sortOrder=1))

        roots = client.get("/api/categories/roots")
        tree = client.get("/api/categories/")

        assert created["name"] == name
        assert roots.status_code == 200
        assert [r["name"] for r in roots.json()] == [name, ("Reserve " * 20).strip()]
        assert tree.status_code == 200
        assert len(tree.json()) == 2

    def test_tree_skips_malformed_record(self, client, mock_db):
        spirits = self.create(client, name="Spirits", level=0)
        insert_raw(mock_db, raw_category("Cordials", 5, parent=ObjectId(spirits["_id"])))

        response = client.get("/api/categories/")

        assert response.status_code == 200
        assert [node["name"] for node in response.json()] == ["Spirits"]
        assert response.json()[0]["subcategories"] == []

    def test_path(self, client):
        spirits, whiskey, bourbon = self.build_chain(client)

        response = client.get(f"/api/categories/{bourbon['_id']}/path")

        assert response.status_code == 200
        data = response.json()
        assert data["degraded"] is False
        assert [c["_id"] for c in data["path"]] == [spirits["_id"], whiskey["_id"], bourbon["_id"]]

    def test_path_with_dangling_parent_is_degraded(self, client, mock_db):
        orphan_id = insert_raw(mock_db, raw_category("Orphan", 1, parent=ObjectId()))

        response = client.get(f"/api/categories/{orphan_id}/path")

        assert response.status_code == 200
        data = response.json()
        assert data["degraded"] is True
        assert data["warning"]
        assert [c["name"] for c in data["path"]] == ["Orphan"]

    def test_update_category(self, client):
        spirits = self.create(client, name="Spirits", level=0)
        editor = str(ObjectId())

        response = client.patch(
            f"/api/categories/{spirits['_id']}",
            json={"name": "Liquor", "sortOrder": 4},
            headers={"X-User-Id": editor}
        )

        assert response.status_code == 200
        data = response.json()
        assert data["name"] == "Liquor"
        assert data["sortOrder"] == 4
        assert data["updatedBy"] == editor
        assert data["createdBy"] == self.admin_id

    def test_update_level_with_children_conflicts(self, client):
        spirits, whiskey, bourbon = self.build_chain(client)
        wine = self.create(client, name="Wine", level=0)
        red = self.create(client, name="Red", level=1, parent=wine["_id"])

        response = client.patch(
            f"/api/categories/{whiskey['_id']}",
            json={"level": 2, "parent": red["_id"]},
            headers=self.headers
        )

        assert response.status_code == 409
        assert response.json()["field"] == "level"

    def test_deactivate_and_activate(self, client):
        spirits, whiskey, bourbon = self.build_chain(client)

        response = client.post(f"/api/categories/{spirits['_id']}/deactivate", headers=self.headers)
        assert response.status_code == 200
        assert response.json()["isActive"] is False

        child = client.get(f"/api/categories/{whiskey['_id']}").json()
        assert child["isActive"] is True

        response = client.post(f"/api/categories/{spirits['_id']}/activate", headers=self.headers)
        assert response.status_code == 200
        assert response.json()["isActive"] is True

    def test_delete(self, client):
        spirits, whiskey, bourbon = self.build_chain(client)

        blocked = client.delete(f"/api/categories/{whiskey['_id']}", headers=self.headers)
        assert blocked.status_code == 409

        response = client.delete(f"/api/categories/{bourbon['_id']}", headers=self.headers)
        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["deleted_category"]["id"] == bourbon["_id"]

        assert client.get(f"/api/categories/{bourbon['_id']}").status_code == 404


class TestDepartmentsAPI:

    def setup_method(self):
        self.headers = {"X-User-Id": str(ObjectId())}

    def create(self, client, **data):
        return client.post("/api/categories/", json=data, headers=self.headers).json()

    def test_departments(self, client):
        spirits = self.create(client, name="Spirits", level=0)
        wine = self.create(client, name="Wine", level=0, sortOrder=1)
        whiskey = self.create(client, name="Whiskey", level=1, parent=spirits["_id"])
        self.create(client, name="Scotch", level=2, parent=whiskey["_id"])
        self.create(client, name="Bourbon", level=2, parent=whiskey["_id"], sortOrder=5)
        self.create(client, name="Red Wine", level=1, parent=wine["_id"])

        response = client.get("/api/departments")

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["departments"] == [
            {
                "department": "Spirits",
                "categories": [{"category": "Whiskey", "subcategories": ["Bourbon", "Scotch"]}]
            },
            {
                "department": "Wine",
                "categories": [{"category": "Red Wine", "subcategories": []}]
            },
        ]

    def test_no_departments(self, client):
        response = client.get("/api/departments")

        assert response.status_code == 200
        data = response.json()
        assert data["departments"] == []
        assert data["message"] == "No active categories found"


class TestHealthAPI:

    def test_health_without_database(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "degraded"
        assert data["database"] == "unavailable"

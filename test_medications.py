def create_medication(client, headers, **overrides):
    payload = {
        "name": "Paracetamol 500mg",
        "category": "pain-relief",
        "unitType": "pill",
        "unitTypeDisplay": "tablet",
        "stockQuantity": 20,
        "lowStockThreshold": 10,
    }
    payload.update(overrides)
    return client.post("/api/medications", json=payload, headers=headers)


def test_create_medication(client, admin):
    """Test creating a medication"""
    response = create_medication(client, admin[1])
    assert response.status_code == 201
    data = response.json()["data"]
    assert data["stockQuantity"] == 20
    assert data["isActive"] is True


def test_medications_require_permission(client, patient):
    """Test patients cannot manage medications"""
    assert create_medication(client, patient[1]).status_code == 403


def test_invalid_category(client, admin):
    """Test unknown categories are rejected"""
    assert create_medication(client, admin[1], category="candy").status_code == 400


def test_stock_adjustment(client, admin):
    """Test stock goes up and down but never below zero"""
    medication_id = create_medication(client, admin[1]).json()["data"]["id"]
    url = f"/api/medications/{medication_id}/stock"

    assert client.put(url, json={"delta": 5}, headers=admin[1]).json()["data"]["stockQuantity"] == 25
    assert client.put(url, json={"delta": -20}, headers=admin[1]).json()["data"]["stockQuantity"] == 5

    response = client.put(url, json={"delta": -6}, headers=admin[1])
    assert response.status_code == 400
    assert "Only 5 tablet left" in response.json()["message"]


def test_low_stock(client, admin):
    """Test the low-stock listing"""
    create_medication(client, admin[1])
    low_id = create_medication(client, admin[1], name="Ibuprofen", stockQuantity=3).json()["data"]["id"]
    data = client.get("/api/medications/low-stock", headers=admin[1]).json()["data"]
    assert [m["id"] for m in data] == [low_id]


def test_list_search_and_soft_delete(client, admin):
    """Test searching and soft deleting"""
    medication_id = create_medication(client, admin[1]).json()["data"]["id"]
    create_medication(client, admin[1], name="Amoxicillin", category="antibiotic")

    response = client.get("/api/medications", params={"search": "para"}, headers=admin[1])
    assert response.json()["total"] == 1

    assert client.delete(f"/api/medications/{medication_id}", headers=admin[1]).status_code == 200
    assert client.get("/api/medications", headers=admin[1]).json()["total"] == 1
    response = client.get("/api/medications", params={"includeInactive": True}, headers=admin[1])
    assert response.json()["total"] == 2


def test_update_medication(client, admin):
    """Test updating a medication"""
    medication_id = create_medication(client, admin[1]).json()["data"]["id"]
    response = client.put(f"/api/medications/{medication_id}", json={"manufacturer": "ACME"}, headers=admin[1])
    assert response.status_code == 200
    assert response.json()["data"]["manufacturer"] == "ACME"

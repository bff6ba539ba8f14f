from datetime import datetime, timedelta

from hospital_booking.database import utcnow
from hospital_booking.models.coupon import Coupon


def create_coupon(client, headers, **overrides):
    coupon_data = {
        "code": "SAVE10",
        "discountType": "percentage",
        "discountValue": 10,
        "maxDiscount": 50000,
        "minPurchase": 100000,
        "description": "10% off",
    }
    coupon_data.update(overrides)
    return client.post("/api/coupons", json=coupon_data, headers=headers)


def validate(client, headers, code, amount=None, **extra):
    payload = {"code": code, **extra}
    if amount is not None:
        payload["amount"] = amount
    return client.post("/api/coupons/validate", json=payload, headers=headers)


def test_create_percentage_coupon(client, admin):
    """Test creating a percentage coupon"""
    _, headers = admin
    response = create_coupon(client, headers)
    assert response.status_code == 201
    data = response.json()["data"]
    assert data["code"] == "SAVE10"
    assert data["discountType"] == "percentage"
    assert data["usedCount"] == 0
    assert data["isActive"] is True
    assert data["isValid"] is True


def test_create_coupon_normalizes_code(client, admin):
    """Test codes are trimmed and upper-cased on create"""
    _, headers = admin
    response = create_coupon(client, headers, code="  welcome5 ")
    assert response.status_code == 201
    assert response.json()["data"]["code"] == "WELCOME5"


def test_create_coupon_invalid_code_format(client, admin):
    """Test creating coupon with a malformed code"""
    _, headers = admin
    response = create_coupon(client, headers, code="BAD-CODE!")
    assert response.status_code == 400
    assert response.json()["success"] is False


def test_create_coupon_duplicate_code(client, admin):
    """Test duplicate codes are rejected with a conflict"""
    _, headers = admin
    assert create_coupon(client, headers).status_code == 201
    response = create_coupon(client, headers, code="save10")
    assert response.status_code == 409
    assert response.json()["code"] == "CONFLICT"


def test_create_coupon_invalid_percentage(client, admin):
    """Test percentage values above 100 are rejected"""
    _, headers = admin
    response = create_coupon(client, headers, discountValue=150)
    assert response.status_code == 400


def test_create_coupon_with_future_start_is_inactive(client, admin):
    """Test a coupon that starts later is stored inactive"""
    _, headers = admin
    start = (utcnow() + timedelta(days=5)).isoformat()
    response = create_coupon(client, headers, startDate=start)
    assert response.status_code == 201
    assert response.json()["data"]["isActive"] is False


def test_create_coupon_requires_permission(client, patient):
    """Test ordinary users cannot manage coupons"""
    _, headers = patient
    response = create_coupon(client, headers)
    assert response.status_code == 403


def test_get_coupons(client, admin):
    """Test getting all coupons"""
    _, headers = admin
    create_coupon(client, headers)
    create_coupon(client, headers, code="FLAT20K", discountType="fixed", discountValue=20000)

    response = client.get("/api/coupons", headers=headers)
    assert response.status_code == 200
    data = response.json()
    assert data["total"] == 2
    assert data["count"] == 2
    assert data["currentPage"] == 1

    response = client.get("/api/coupons", params={"discountType": "fixed"}, headers=headers)
    assert [c["code"] for c in response.json()["data"]] == ["FLAT20K"]


def test_update_coupon(client, admin):
    """Test updating a coupon"""
    _, headers = admin
    coupon_id = create_coupon(client, headers).json()["data"]["id"]
    response = client.put(f"/api/coupons/{coupon_id}", json={"discountValue": 15, "usageLimit": 5}, headers=headers)
    assert response.status_code == 200
    data = response.json()["data"]
    assert data["discountValue"] == 15
    assert data["usageLimit"] == 5


def test_delete_unused_coupon(client, admin):
    """Test an unused coupon is removed"""
    _, headers = admin
    coupon_id = create_coupon(client, headers).json()["data"]["id"]
    response = client.delete(f"/api/coupons/{coupon_id}", headers=headers)
    assert response.status_code == 200
    assert client.get(f"/api/coupons/{coupon_id}", headers=headers).status_code == 404


def test_delete_used_coupon_deactivates(client, db, admin):
    """Test a redeemed coupon is deactivated instead of deleted"""
    _, headers = admin
    coupon_id = create_coupon(client, headers).json()["data"]["id"]
    coupon = db.query(Coupon).filter(Coupon.id == coupon_id).first()
    coupon.used_count = 1
    db.commit()

    response = client.delete(f"/api/coupons/{coupon_id}", headers=headers)
    assert response.status_code == 200
    data = client.get(f"/api/coupons/{coupon_id}", headers=headers).json()["data"]
    assert data["isActive"] is False


def test_validate_percentage_coupon(client, admin, patient):
    """Test applying a capped percentage coupon"""
    create_coupon(client, admin[1])
    response = validate(client, patient[1], "SAVE10", 300000)
    assert response.status_code == 200
    data = response.json()["data"]
    assert data["discountAmount"] == 30000
    assert data["finalAmount"] == 270000


def test_validate_percentage_coupon_capped(client, admin, patient):
    """Test max discount caps a percentage coupon"""
    create_coupon(client, admin[1])
    data = validate(client, patient[1], "SAVE10", 1000000).json()["data"]
    assert data["discountAmount"] == 50000
    assert data["finalAmount"] == 950000


def test_validate_fixed_coupon_clamped_to_amount(client, admin, patient):
    """Test a fixed coupon never exceeds the amount"""
    create_coupon(
        client, admin[1], code="FLAT20K", discountType="fixed", discountValue=20000, maxDiscount=None, minPurchase=0
    )
    data = validate(client, patient[1], "flat20k", 15000).json()["data"]
    assert data["discountAmount"] == 15000
    assert data["finalAmount"] == 0


def test_validate_unknown_coupon(client, patient):
    """Test validating a non-existent code"""
    response = validate(client, patient[1], "NOPE123", 100000)
    assert response.status_code == 404


def test_validate_expired_coupon(client, db, patient):
    """Test an expired coupon is rejected"""
    now = utcnow()
    db.add(Coupon(
        code="OLD10", discount_type="percentage", discount_value=10,
        start_date=now - timedelta(days=10), end_date=now - timedelta(days=1),
    ))
    db.commit()
    response = validate(client, patient[1], "OLD10", 100000)
    assert response.status_code == 400
    assert response.json()["code"] == "COUPON_EXPIRED"


def test_validate_limit_reached(client, db, patient):
    """Test a fully used coupon is rejected"""
    db.add(Coupon(code="ONCE", discount_type="fixed", discount_value=10000, usage_limit=1, used_count=1))
    db.commit()
    response = validate(client, patient[1], "ONCE", 100000)
    assert response.status_code == 400
    assert response.json()["code"] == "LIMIT_REACHED"


def test_validate_below_minimum(client, admin, patient):
    """Test min purchase is enforced"""
    create_coupon(client, admin[1], minPurchase=500000)
    response = validate(client, patient[1], "SAVE10", 300000)
    assert response.status_code == 400
    body = response.json()
    assert body["code"] == "BELOW_MINIMUM"
    assert "500,000 VND" in body["message"]


def test_validate_service_scope(client, admin, patient, service):
    """Test a service-restricted coupon needs a matching service"""
    create_coupon(client, admin[1], applicableServices=[service.id])

    response = validate(client, patient[1], "SAVE10", 300000)
    assert response.status_code == 400
    assert response.json()["code"] == "SERVICE_NOT_APPLICABLE"

    response = validate(client, patient[1], "SAVE10", 300000, serviceId=service.id + 100)
    assert response.json()["code"] == "SERVICE_NOT_APPLICABLE"

    response = validate(client, patient[1], "SAVE10", 300000, serviceId=service.id)
    assert response.status_code == 200


def test_validate_specialty_scope(client, admin, patient, specialty):
    """Test a specialty-restricted coupon needs a matching specialty"""
    create_coupon(client, admin[1], applicableSpecialties=[specialty.id])
    response = validate(client, patient[1], "SAVE10", 300000)
    assert response.json()["code"] == "SPECIALTY_NOT_APPLICABLE"
    response = validate(client, patient[1], "SAVE10", 300000, specialtyId=specialty.id)
    assert response.status_code == 200


def test_coupon_info_lookup(client, admin, patient):
    """Test looking a coupon up by code"""
    create_coupon(client, admin[1])
    response = client.get("/api/coupons/validate", params={"code": "save10"}, headers=patient[1])
    assert response.status_code == 200
    data = response.json()["data"]
    assert data["code"] == "SAVE10"
    assert data["isValid"] is True


def test_validate_requires_login(client):
    """Test coupon validation needs a token"""
    response = client.post("/api/coupons/validate", json={"code": "SAVE10", "amount": 1000})
    assert response.status_code == 401


def test_validation_error_shape(client, admin):
    """Test malformed bodies produce the validation envelope"""
    response = client.post("/api/coupons", json={"code": "X"}, headers=admin[1])
    assert response.status_code == 400
    body = response.json()
    assert body["success"] is False
    assert body["message"] == "Validation failed"
    assert any(err["field"] == "discountType" for err in body["errors"])


def test_coupon_not_found(client, admin):
    """Test getting non-existent coupon"""
    response = client.get("/api/coupons/999999", headers=admin[1])
    assert response.status_code == 404


def test_health_endpoint(client):
    """Test health check endpoint"""
    response = client.get("/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"


def test_code_normalization_is_idempotent(client, admin, patient):
    """Test SAVE10, save10 and padded codes validate identically"""
    create_coupon(client, admin[1])
    results = [validate(client, patient[1], code, 300000).json()["data"] for code in ("SAVE10", "save10", " SAVE10 ")]
    assert results[0] == results[1] == results[2]


def window_coupon(**overrides):
    fields = {
        "code": "WINDOW",
        "discount_type": "percentage",
        "discount_value": 10,
        "start_date": datetime(2026, 1, 1, 8, 0, 0),
        "end_date": datetime(2026, 1, 31, 20, 0, 0),
        "used_count": 0,
        "is_active": True,
    }
    fields.update(overrides)
    return Coupon(**fields)


def test_coupon_window_bounds_are_inclusive():
    """Test a coupon is valid exactly at its start and end instants"""
    coupon = window_coupon()
    assert not coupon.is_expired_at(coupon.start_date)
    assert not coupon.is_expired_at(coupon.end_date)
    assert coupon.is_valid_at(coupon.start_date)
    assert coupon.is_valid_at(coupon.end_date)


def test_coupon_outside_window():
    """Test a coupon one second outside its window"""
    coupon = window_coupon()
    before = coupon.start_date - timedelta(seconds=1)
    after = coupon.end_date + timedelta(seconds=1)
    assert coupon.is_expired_at(before)
    assert coupon.is_expired_at(after)
    assert not coupon.is_valid_at(before)
    assert not coupon.is_valid_at(after)


def test_coupon_without_end_date():
    """Test an open-ended coupon stays valid"""
    coupon = window_coupon(end_date=None)
    assert coupon.is_valid_at(datetime(2030, 1, 1))


def test_inactive_coupon_is_not_valid():
    """Test is_valid requires the coupon to be active"""
    now = utcnow()
    coupon = window_coupon(start_date=now - timedelta(days=1), end_date=now + timedelta(days=1))
    assert coupon.is_valid
    coupon.is_active = False
    assert not coupon.is_valid
    assert not coupon.is_valid_at(now)


def test_coupon_at_usage_limit_is_not_valid():
    """Test is_valid_at fails once the usage limit is reached"""
    coupon = window_coupon(usage_limit=3, used_count=3)
    assert coupon.is_limit_reached()
    assert not coupon.is_valid_at(datetime(2026, 1, 15))

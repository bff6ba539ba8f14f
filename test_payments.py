from hospital_booking.models.appointment import Appointment
from hospital_booking.models.payment import Payment
from hospital_booking.models.coupon import Coupon
from hospital_booking.models.notification import Notification


def book_with_coupon(client, db, patient, doctor, hospital, day):
    db.add(Coupon(code="SAVE10", discount_type="percentage", discount_value=10, usage_limit=10))
    db.commit()
    response = client.post(
        "/api/appointments",
        json={
            "doctorId": doctor.id,
            "hospitalId": hospital.id,
            "appointmentDate": day.isoformat(),
            "timeSlot": {"startTime": "09:00", "endTime": "09:30"},
            "couponCode": "SAVE10",
        },
        headers=patient[1],
    )
    assert response.status_code == 201
    return response.json()["data"]


def used_count(db):
    db.expire_all()
    return db.query(Coupon).filter(Coupon.code == "SAVE10").one().used_count


def test_create_momo_payment_intent(client, db, patient, doctor, hospital, future_day):
    """Test a MoMo intent marks the appointment pending and returns a redirect"""
    appointment = book_with_coupon(client, db, patient, doctor[0], hospital, future_day)
    response = client.post(f"/api/payments/{appointment['id']}", json={"method": "momo"}, headers=patient[1])
    assert response.status_code == 201
    data = response.json()["data"]
    assert data["payment"]["amount"] == 180000
    assert data["payment"]["status"] == "pending"
    assert data["payment"]["transactionId"].startswith("MOMO")
    assert data["redirectUrl"].endswith(f"orderId={data['payment']['transactionId']}&amount=180000")

    detail = client.get(f"/api/appointments/{appointment['id']}", headers=patient[1]).json()["data"]
    assert detail["paymentStatus"] == "pending"


def test_paypal_capture_confirms_payment(client, db, patient, doctor, hospital, future_day):
    """Test a successful capture pays, confirms and redeems the coupon once"""
    appointment = book_with_coupon(client, db, patient, doctor[0], hospital, future_day)
    payment = client.post(
        f"/api/payments/{appointment['id']}", json={"method": "paypal"}, headers=patient[1]
    ).json()["data"]["payment"]

    capture = {"transactionId": payment["transactionId"], "approved": True, "details": {"id": "PAY-1"}}
    response = client.post("/api/payments/paypal/capture", json=capture, headers=patient[1])
    assert response.status_code == 200
    data = response.json()["data"]
    assert data["status"] == "completed"
    assert data["paidAt"] is not None

    detail = client.get(f"/api/appointments/{appointment['id']}", headers=patient[1]).json()["data"]
    assert detail["paymentStatus"] == "completed"
    assert detail["status"] == "confirmed"
    assert used_count(db) == 1

    # a retried callback changes nothing
    response = client.post("/api/payments/paypal/capture", json=capture, headers=patient[1])
    assert response.status_code == 200
    assert used_count(db) == 1
    assert db.query(Notification).filter(Notification.type == "payment").count() == 1


def test_momo_ipn_failure(client, db, patient, doctor, hospital, future_day):
    """Test a failed MoMo callback leaves the appointment unpaid"""
    appointment = book_with_coupon(client, db, patient, doctor[0], hospital, future_day)
    payment = client.post(
        f"/api/payments/{appointment['id']}", json={"method": "momo"}, headers=patient[1]
    ).json()["data"]["payment"]

    response = client.post(
        "/api/payments/momo/ipn",
        json={"orderId": payment["transactionId"], "resultCode": 1006, "message": "Declined"},
    )
    assert response.status_code == 200
    assert response.json()["data"]["status"] == "failed"

    detail = client.get(f"/api/appointments/{appointment['id']}", headers=patient[1]).json()["data"]
    assert detail["paymentStatus"] == "unpaid"
    assert detail["status"] == "pending"
    assert used_count(db) == 0


def test_momo_ipn_success(client, db, patient, doctor, hospital, future_day):
    """Test a successful MoMo callback"""
    appointment = book_with_coupon(client, db, patient, doctor[0], hospital, future_day)
    payment = client.post(
        f"/api/payments/{appointment['id']}", json={"method": "momo"}, headers=patient[1]
    ).json()["data"]["payment"]
    response = client.post("/api/payments/momo/ipn", json={"orderId": payment["transactionId"], "resultCode": 0})
    assert response.json()["data"]["status"] == "completed"
    assert used_count(db) == 1


def test_pay_already_paid(client, db, patient, doctor, hospital, future_day):
    """Test a paid appointment cannot get a new intent"""
    appointment = book_with_coupon(client, db, patient, doctor[0], hospital, future_day)
    payment = client.post(
        f"/api/payments/{appointment['id']}", json={"method": "momo"}, headers=patient[1]
    ).json()["data"]["payment"]
    client.post("/api/payments/momo/ipn", json={"orderId": payment["transactionId"], "resultCode": 0})

    response = client.post(f"/api/payments/{appointment['id']}", json={"method": "paypal"}, headers=patient[1])
    assert response.status_code == 400


def test_unknown_transaction(client):
    """Test callbacks for unknown transactions"""
    response = client.post("/api/payments/momo/ipn", json={"orderId": "MOMO404", "resultCode": 0})
    assert response.status_code == 404


def test_payment_history(client, db, patient, doctor, hospital, future_day):
    """Test a patient's payment history"""
    appointment = book_with_coupon(client, db, patient, doctor[0], hospital, future_day)
    client.post(f"/api/payments/{appointment['id']}", json={"method": "paypal"}, headers=patient[1])
    response = client.get("/api/payments/history", headers=patient[1])
    assert response.status_code == 200
    assert len(response.json()["data"]) == 1


def test_one_pending_intent_per_appointment(client, db, patient, doctor, hospital, future_day):
    """Test repeated intents reuse the pending payment and redeem the coupon once"""
    appointment = book_with_coupon(client, db, patient, doctor[0], hospital, future_day)
    first = client.post(f"/api/payments/{appointment['id']}", json={"method": "paypal"}, headers=patient[1])
    second = client.post(f"/api/payments/{appointment['id']}", json={"method": "paypal"}, headers=patient[1])
    assert second.status_code == 201
    transaction_id = first.json()["data"]["payment"]["transactionId"]
    assert second.json()["data"]["payment"]["transactionId"] == transaction_id

    response = client.post(f"/api/payments/{appointment['id']}", json={"method": "momo"}, headers=patient[1])
    assert response.status_code == 400
    assert db.query(Payment).filter(Payment.appointment_id == appointment["id"]).count() == 1

    client.post("/api/payments/paypal/capture", json={"transactionId": transaction_id, "approved": True}, headers=patient[1])
    assert used_count(db) == 1


def test_new_intent_after_failed_payment(client, db, patient, doctor, hospital, future_day):
    """Test a failed payment can be retried with another gateway"""
    appointment = book_with_coupon(client, db, patient, doctor[0], hospital, future_day)
    payment = client.post(
        f"/api/payments/{appointment['id']}", json={"method": "momo"}, headers=patient[1]
    ).json()["data"]["payment"]
    client.post("/api/payments/momo/ipn", json={"orderId": payment["transactionId"], "resultCode": 1006})

    response = client.post(f"/api/payments/{appointment['id']}", json={"method": "paypal"}, headers=patient[1])
    assert response.status_code == 201
    assert response.json()["data"]["payment"]["transactionId"] != payment["transactionId"]


def add_stray_payment(db, appointment_id, patient_id, transaction_id):
    db.add(Payment(
        appointment_id=appointment_id, patient_id=patient_id, amount=180000,
        method="momo", transaction_id=transaction_id,
    ))
    db.commit()


def test_late_success_on_paid_appointment(client, db, patient, doctor, hospital, future_day):
    """Test a second successful capture does not redeem the coupon again"""
    appointment = book_with_coupon(client, db, patient, doctor[0], hospital, future_day)
    payment = client.post(
        f"/api/payments/{appointment['id']}", json={"method": "paypal"}, headers=patient[1]
    ).json()["data"]["payment"]
    add_stray_payment(db, appointment["id"], patient[0].id, "MOMOSTRAY1")

    client.post("/api/payments/paypal/capture", json={"transactionId": payment["transactionId"], "approved": True},
                headers=patient[1])
    response = client.post("/api/payments/momo/ipn", json={"orderId": "MOMOSTRAY1", "resultCode": 0})
    assert response.status_code == 200
    assert used_count(db) == 1
    assert db.query(Notification).filter(Notification.type == "payment").count() == 1


def test_late_failure_keeps_paid_appointment(client, db, patient, doctor, hospital, future_day):
    """Test a failed callback does not unpay a paid appointment"""
    appointment = book_with_coupon(client, db, patient, doctor[0], hospital, future_day)
    payment = client.post(
        f"/api/payments/{appointment['id']}", json={"method": "paypal"}, headers=patient[1]
    ).json()["data"]["payment"]
    add_stray_payment(db, appointment["id"], patient[0].id, "MOMOSTRAY2")

    client.post("/api/payments/paypal/capture", json={"transactionId": payment["transactionId"], "approved": True},
                headers=patient[1])
    response = client.post("/api/payments/momo/ipn", json={"orderId": "MOMOSTRAY2", "resultCode": 1006})
    assert response.json()["data"]["status"] == "failed"

    db.expire_all()
    stored = db.query(Appointment).filter(Appointment.id == appointment["id"]).one()
    assert stored.payment_status == "completed"
    assert stored.status == "confirmed"


def test_capture_requires_payment_owner(client, db, make_user, patient, doctor, hospital, future_day):
    """Test another patient cannot capture someone else's payment"""
    appointment = book_with_coupon(client, db, patient, doctor[0], hospital, future_day)
    payment = client.post(
        f"/api/payments/{appointment['id']}", json={"method": "paypal"}, headers=patient[1]
    ).json()["data"]["payment"]
    _, stranger_headers = make_user()

    response = client.post(
        "/api/payments/paypal/capture",
        json={"transactionId": payment["transactionId"], "approved": False},
        headers=stranger_headers,
    )
    assert response.status_code == 404

    db.expire_all()
    assert db.query(Payment).filter(Payment.transaction_id == payment["transactionId"]).one().status == "pending"
    detail = client.get(f"/api/appointments/{appointment['id']}", headers=patient[1]).json()["data"]
    assert detail["paymentStatus"] == "pending"

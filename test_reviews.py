from hospital_booking.models.appointment import Appointment


def completed_appointment(db, patient, doctor, hospital, day):
    appointment = Appointment(
        patient_id=patient.id,
        doctor_id=doctor.id,
        hospital_id=hospital.id,
        appointment_date=day,
        start_time="09:00",
        end_time="09:30",
        status="completed",
    )
    db.add(appointment)
    db.commit()
    db.refresh(appointment)
    return appointment


def hospital_rating(client, hospital_id):
    data = client.get(f"/api/hospitals/{hospital_id}").json()["data"]
    return data["averageRating"], data["reviewCount"]


def test_rating_is_mean_of_reviews(client, make_user, hospital):
    """Test the hospital rating follows inserts and deletes"""
    _, first = make_user("user")
    _, second = make_user("user")
    url = f"/api/hospitals/{hospital.id}/reviews"

    assert client.post(url, json={"rating": 5, "comment": "Great"}, headers=first).status_code == 201
    review_id = client.post(url, json={"rating": 2}, headers=second).json()["data"]["id"]
    assert hospital_rating(client, hospital.id) == (3.5, 2)

    assert client.delete(f"{url}/{review_id}", headers=second).status_code == 200
    assert hospital_rating(client, hospital.id) == (5.0, 1)


def test_rating_out_of_range(client, patient, hospital):
    """Test ratings must be 1-5"""
    response = client.post(f"/api/hospitals/{hospital.id}/reviews", json={"rating": 6}, headers=patient[1])
    assert response.status_code == 400


def test_delete_someone_elses_review(client, make_user, hospital):
    """Test only the author can delete a review"""
    _, author = make_user("user")
    _, other = make_user("user")
    url = f"/api/hospitals/{hospital.id}/reviews"
    review_id = client.post(url, json={"rating": 4}, headers=author).json()["data"]["id"]
    assert client.delete(f"{url}/{review_id}", headers=other).status_code == 403


def test_list_reviews(client, patient, hospital):
    """Test listing a hospital's reviews with their authors"""
    client.post(f"/api/hospitals/{hospital.id}/reviews", json={"rating": 4, "comment": "Clean"}, headers=patient[1])
    data = client.get(f"/api/hospitals/{hospital.id}/reviews").json()["data"]
    assert len(data) == 1
    assert data[0]["user"]["id"] == patient[0].id


def test_review_completed_appointment(client, db, patient, doctor, hospital, future_day):
    """Test reviewing an appointment once it is completed"""
    appointment = completed_appointment(db, patient[0], doctor[0], hospital, future_day)
    url = f"/api/appointments/{appointment.id}/review"

    response = client.post(url, json={"rating": 4, "comment": "Kind doctor"}, headers=patient[1])
    assert response.status_code == 201
    assert response.json()["data"]["appointmentId"] == appointment.id

    detail = client.get(f"/api/appointments/{appointment.id}", headers=patient[1]).json()["data"]
    assert detail["isReviewed"] is True
    assert hospital_rating(client, hospital.id) == (4.0, 1)

    response = client.post(url, json={"rating": 5}, headers=patient[1])
    assert response.status_code == 400


def test_review_pending_appointment(client, patient, doctor, hospital, future_day):
    """Test unfinished appointments cannot be reviewed"""
    response = client.post(
        "/api/appointments",
        json={
            "doctorId": doctor[0].id,
            "hospitalId": hospital.id,
            "appointmentDate": future_day.isoformat(),
            "timeSlot": {"startTime": "09:00", "endTime": "09:30"},
        },
        headers=patient[1],
    )
    appointment_id = response.json()["data"]["id"]
    response = client.post(f"/api/appointments/{appointment_id}/review", json={"rating": 5}, headers=patient[1])
    assert response.status_code == 400


def test_deleting_review_reopens_appointment(client, db, patient, doctor, hospital, future_day):
    """Test an appointment can be reviewed again after its review is deleted"""
    appointment = completed_appointment(db, patient[0], doctor[0], hospital, future_day)
    url = f"/api/appointments/{appointment.id}/review"
    review_id = client.post(url, json={"rating": 2}, headers=patient[1]).json()["data"]["id"]

    response = client.delete(f"/api/hospitals/{hospital.id}/reviews/{review_id}", headers=patient[1])
    assert response.status_code == 200
    detail = client.get(f"/api/appointments/{appointment.id}", headers=patient[1]).json()["data"]
    assert detail["isReviewed"] is False

    response = client.post(url, json={"rating": 5}, headers=patient[1])
    assert response.status_code == 201
    assert hospital_rating(client, hospital.id) == (5.0, 1)

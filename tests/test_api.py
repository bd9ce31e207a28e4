from datetime import datetime, timedelta
from decimal import Decimal

from conftest import add_flight, add_promotion, adult


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "healthy"}


def test_create_and_fetch_booking(client, session_factory):
    with session_factory() as session:
        flight_id = add_flight(session).id

    response = client.post("/api/bookings/", json={
        "departureFlightId": "VN123",
        "customerInfo": {"fullName": "Nguyen Van A", "email": "a@example.com", "seatClass": "economy"},
        "passengers": [adult(), adult("Tran Thi B")],
        "paymentMethod": "bank_transfer",
    })

    assert response.status_code == 201
    body = response.json()
    assert body["success"] is True
    assert Decimal(body["total_amount"]) == Decimal("2000000")
    assert body["flight_details"]["flight_id"] == flight_id

    booking = client.get(f"/api/bookings/{body['booking_id']}").json()
    assert booking["booking"]["payment_status"] == "unpaid"
    assert booking["passenger_counts"] == {"numAdults": 2, "numChildren": 0, "numInfants": 0}
    assert booking["payment_info"]["method"] == "bank_transfer"
    assert booking["departure_flight"]["seats"]["ECONOMY"] == 8


def test_insufficient_seats_is_a_conflict(client, session_factory):
    with session_factory() as session:
        flight_id = add_flight(session, seats_economy=1).id

    response = client.post("/api/bookings/", json={
        "departureFlightId": flight_id,
        "customerInfo": {"fullName": "Nguyen Van A"},
        "passengers": [adult(), adult("Tran Thi B")],
    })

    assert response.status_code == 409
    body = response.json()
    assert body["error"] == "insufficient_seats"
    assert body["available"] == 1
    assert body["requested"] == 2


def test_missing_information_is_a_bad_request(client):
    response = client.post("/api/bookings/", json={"passengers": []})

    assert response.status_code == 400
    assert response.json()["missing_fields"] == ["departure_flight_id", "customer_info", "passengers"]


def test_unknown_booking_is_not_found(client):
    response = client.get("/api/bookings/UNKNOWN123")
    assert response.status_code == 404
    assert response.json()["error"] == "booking_not_found"


def test_payment_status_lifecycle(client, session_factory):
    with session_factory() as session:
        add_flight(session)

    booking_id = client.post("/api/bookings/", json={
        "departureFlightId": "VN123",
        "customerInfo": {"fullName": "Nguyen Van A"},
        "passengers": [adult()],
    }).json()["booking_id"]

    paid = client.patch(f"/api/bookings/{booking_id}/payment", json={"paymentStatus": "paid"})
    assert paid.status_code == 200
    assert paid.json()["payment_status"] == "paid"

    refunded = client.patch(f"/api/bookings/{booking_id}/payment", json={"payment_status": "refunded"})
    assert refunded.json()["seats_released"] == 1

    rejected = client.patch(f"/api/bookings/{booking_id}/payment", json={"paymentStatus": "paid"})
    assert rejected.status_code == 400
    assert rejected.json()["error"] == "invalid_status"


def test_validate_promo_code(client, session_factory):
    now = datetime.now()
    with session_factory() as session:
        add_promotion(session, code="SALE25")
        add_promotion(session, code="OLD", valid_from=now - timedelta(days=9), valid_to=now - timedelta(days=1))

    valid = client.post("/api/promotions/validate", json={"code": "SALE25"})
    assert valid.status_code == 200
    assert valid.json()["valid"] is True
    assert valid.json()["promo"]["discount_type"] == "percent"

    expired = client.post("/api/promotions/validate", json={"code": "OLD"})
    assert expired.status_code == 404
    assert expired.json()["error"] == "promo_expired"


def test_payment_submission_moves_booking_to_pending(client, session_factory):
    with session_factory() as session:
        add_flight(session)

    booking_id = client.post("/api/bookings/", json={
        "departureFlightId": "VN123",
        "customerInfo": {"fullName": "Nguyen Van A"},
        "passengers": [adult()],
    }).json()["booking_id"]

    submitted = client.post("/api/payments/", json={
        "bookingId": booking_id, "method": "momo", "transactionInfo": "MOMO-42"
    })
    assert submitted.status_code == 201
    assert submitted.json()["transaction_info"] == "MOMO-42"

    booking = client.get(f"/api/bookings/{booking_id}").json()
    assert booking["booking"]["payment_status"] == "pending"

    again = client.post("/api/payments/", json={"bookingId": booking_id, "method": "momo"})
    assert again.status_code == 409

    assert client.get(f"/api/payments/{booking_id}").json()["method"] == "momo"


def test_payment_submission_rejects_unknown_method(client, session_factory):
    with session_factory() as session:
        add_flight(session)

    booking_id = client.post("/api/bookings/", json={
        "departureFlightId": "VN123",
        "customerInfo": {"fullName": "Nguyen Van A"},
        "passengers": [adult()],
    }).json()["booking_id"]

    response = client.post("/api/payments/", json={"bookingId": booking_id, "method": "cash"})
    assert response.status_code == 400
    assert client.get(f"/api/payments/{booking_id}").status_code == 404


def test_flight_catalogue_endpoints(client):
    departure = datetime(2030, 1, 10, 6, 0)
    payload = {
        "airline": "Bamboo Airways",
        "airline_code": "QH",
        "flight_number": "101",
        "departure_airport": "HAN",
        "arrival_airport": "PQC",
        "departure_time": departure.isoformat(),
        "arrival_time": (departure + timedelta(hours=2)).isoformat(),
        "price_economy": "1500000",
        "seats_economy": 100,
        "available_classes": ["ECONOMY"],
    }

    created = client.post("/api/flights/", json=payload)
    assert created.status_code == 201
    assert created.json()["id"] == "QH101"
    assert created.json()["duration"] == "2h 0m"

    listed = client.get("/api/flights/", params={"departure": "HAN", "departDate": "2030-01-10"})
    assert [f["id"] for f in listed.json()] == ["QH101"]

    assert client.get("/api/flights/QH101").json()["available_seats"] == 100
    assert client.delete("/api/flights/QH101").status_code == 200
    assert client.get("/api/flights/QH101").status_code == 404


def test_booking_listing_filters(client, session_factory):
    with session_factory() as session:
        add_flight(session)

    for name in ("Nguyen Van A", "Pham Thi D"):
        client.post("/api/bookings/", json={
            "departureFlightId": "VN123",
            "customerInfo": {"fullName": name},
            "passengers": [adult(name)],
        })

    listed = client.get("/api/bookings/", params={"contactName": "Pham"})
    assert listed.status_code == 200
    assert [b["contact_name"] for b in listed.json()] == ["Pham Thi D"]
    assert listed.json()[0]["passenger_count"] == 1
    assert listed.json()[0]["flight_info"]["departure_airport"] == "SGN"

    assert len(client.get("/api/bookings/", params={"paymentStatus": "unpaid"}).json()) == 2
    assert client.get("/api/bookings/", params={"paymentStatus": "settled"}).status_code == 422

import pytest
from fastapi import status
from labbooker.models.resource import LabResource
from tests.conf_tests import (
    client,
    clear_db,
    make_booking_type,
    make_reservation,
    make_resource,
    test_db,
    test_user,
    admin_user,
    auth_headers,
    admin_headers,
)
from datetime import timedelta
from labbooker.utils.timewindow import utcnow


@pytest.fixture
def test_resource(test_db):
    return make_resource(test_db, name="SSH Box A", description="Primary development lab server")


# Tests
def test_create_resource_unauthorized():
    response = client.post("/resources/", json={"name": "SSH Box B"})
    assert response.status_code in [
        status.HTTP_401_UNAUTHORIZED,
        status.HTTP_403_FORBIDDEN,
    ]


def test_create_resource_requires_admin(auth_headers):
    response = client.post("/resources/", json={"name": "SSH Box B"}, headers=auth_headers)
    assert response.status_code == status.HTTP_403_FORBIDDEN


def test_create_resource_success(admin_headers):
    resource_data = {
        "name": "VPN Gateway",
        "resource_type": "VPN",
        "connection_metadata": {"server": "vpn.lab.example.com"},
    }
    response = client.post("/resources/", json=resource_data, headers=admin_headers)
    assert response.status_code == status.HTTP_201_CREATED
    data = response.json()
    assert data["status"] == "online"
    assert data["is_active"] is True
    assert data["connection_metadata"] == {"server": "vpn.lab.example.com"}


def test_create_resource_invalid_status(admin_headers):
    response = client.post("/resources/", json={"name": "Box", "status": "broken"}, headers=admin_headers)
    assert response.status_code == 422


def test_get_resources_with_data(auth_headers, test_resource):
    response = client.get("/resources/", headers=auth_headers)
    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert len(data) == 1
    assert data[0]["id"] == test_resource.id
    assert data[0]["name"] == test_resource.name


def test_get_resource_not_found(auth_headers):
    response = client.get("/resources/9999", headers=auth_headers)
    assert response.status_code == status.HTTP_404_NOT_FOUND
    assert response.json()["detail"] == "Resource not found"


def test_take_resource_offline(admin_headers, test_resource):
    response = client.put(
        f"/resources/{test_resource.id}", json={"status": "maintenance"}, headers=admin_headers
    )
    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert data["status"] == "maintenance"
    assert data["name"] == test_resource.name


def test_update_resource_not_found(admin_headers):
    response = client.put("/resources/9999", json={"name": "Missing"}, headers=admin_headers)
    assert response.status_code == status.HTTP_404_NOT_FOUND


def test_delete_resource_success(admin_headers, test_resource, test_db):
    response = client.delete(f"/resources/{test_resource.id}", headers=admin_headers)
    assert response.status_code == status.HTTP_204_NO_CONTENT
    test_db.expire_all()
    assert test_db.query(LabResource).filter(LabResource.id == test_resource.id).first() is None


def test_delete_resource_with_bookings(admin_headers, test_resource, test_db, test_user):
    booking_type = make_booking_type(test_db, [test_resource])
    start = utcnow() + timedelta(days=30)
    end = start + timedelta(hours=2)
    make_reservation(test_db, test_user, booking_type, start, end, resource=test_resource)
    response = client.delete(f"/resources/{test_resource.id}", headers=admin_headers)
    assert response.status_code == status.HTTP_400_BAD_REQUEST

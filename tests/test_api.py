"""Endpoints REST: códigos de status e formato das respostas."""

from decimal import Decimal
from uuid import uuid4

from django.contrib.auth import get_user_model
from django.test import TestCase
from rest_framework.test import APIClient

from plugins.django_interface.models import BuyedPackage, Session


class ApiTestCase(TestCase):
    def setUp(self) -> None:
        self.user = get_user_model().objects.create_user(username="recepcao", password="s3cret")
        self.client = APIClient()
        self.client.force_authenticate(self.user)

    def create_patient(self, **extra) -> dict:
        payload = {"name": "Carla Dias", "phone_number": "11988887777", **extra}
        resp = self.client.post("/api/patients/", payload, format="json")
        self.assertEqual(resp.status_code, 201, resp.content)
        return resp.json()

    def create_package(self, patient_id: str, **extra) -> dict:
        payload = {
            "patient_id": patient_id,
            "no_of_sessions": 3,
            "total_payment": "1000.00",
            "advance_payment": "200.00",
            "gap_between_sessions": 7,
            "start_date": "2024-01-01",
            **extra,
        }
        resp = self.client.post("/api/packages/", payload, format="json")
        self.assertEqual(resp.status_code, 201, resp.content)
        return resp.json()


class PatientApiTests(ApiTestCase):
    def test_crud(self) -> None:
        patient = self.create_patient(age=41)
        self.assertEqual(patient["created_by"], str(self.user.pk))

        resp = self.client.patch(f"/api/patients/{patient['id']}/", {"branch_name": "Centro"}, format="json")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["branch_name"], "Centro")

        resp = self.client.get("/api/patients/", {"search": "carla"})
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["total_items"], 1)

        resp = self.client.delete(f"/api/patients/{patient['id']}/")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["patients"], 1)

        self.assertEqual(self.client.get(f"/api/patients/{patient['id']}/").status_code, 404)
        resp = self.client.get(f"/api/patients/{patient['id']}/", {"with_deleted": "true"})
        self.assertTrue(resp.json()["is_deleted"])

    def test_validation_errors(self) -> None:
        resp = self.client.post("/api/patients/", {"name": "  ", "phone_number": "1"}, format="json")
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json()["code"], "invalid_input")

        resp = self.client.get("/api/patients/", {"unknown": "x"})
        self.assertEqual(resp.status_code, 400)

    def test_requires_authentication(self) -> None:
        resp = APIClient().get("/api/patients/")
        self.assertIn(resp.status_code, (401, 403))

    def test_request_id_is_echoed(self) -> None:
        resp = self.client.get("/api/patients/", HTTP_X_REQUEST_ID="req-123")
        self.assertEqual(resp["X-Request-ID"], "req-123")


class PackageApiTests(ApiTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.patient = self.create_patient()

    def test_create_and_read(self) -> None:
        pkg = self.create_package(self.patient["id"])
        self.assertEqual(pkg["payment_cap"], "800.00")
        self.assertEqual(pkg["remaining_sessions"], 3)
        self.assertEqual(pkg["next_session_date"], "2024-01-01")

        resp = self.client.get(f"/api/packages/{pkg['id']}/sessions/")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual([s["status"] for s in resp.json()], ["planned"] * 3)

        resp = self.client.get(f"/api/patients/{self.patient['id']}/packages/")
        self.assertEqual([p["id"] for p in resp.json()], [pkg["id"]])

        resp = self.client.get("/api/packages/")
        self.assertEqual(resp.json()[0]["patient_name"], "Carla Dias")

    def test_invalid_package(self) -> None:
        resp = self.client.post(
            "/api/packages/",
            {
                "patient_id": self.patient["id"],
                "no_of_sessions": 0,
                "total_payment": "100",
                "gap_between_sessions": 7,
                "start_date": "2024-01-01",
            },
            format="json",
        )
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(self.client.get(f"/api/packages/{uuid4()}/").status_code, 404)

    def test_payments_respect_cap(self) -> None:
        pkg = self.create_package(self.patient["id"])

        resp = self.client.post(f"/api/packages/{pkg['id']}/payments/", {"amount": "800"}, format="json")
        self.assertEqual(resp.status_code, 201)
        tx = resp.json()

        resp = self.client.post(f"/api/packages/{pkg['id']}/payments/", {"amount": "1"}, format="json")
        self.assertEqual(resp.status_code, 422)
        self.assertEqual(resp.json()["code"], "payment_exceeds_remaining")
        self.assertEqual(resp.json()["remaining"], "0.00")

        resp = self.client.get(f"/api/packages/{pkg['id']}/ledger/")
        self.assertEqual(resp.json()["paid_payment"], "800.00")

        resp = self.client.patch(f"/api/transactions/{tx['id']}/", {"amount": "300"}, format="json")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(BuyedPackage.objects.get(id=pkg["id"]).paid_payment, Decimal("300.00"))

        resp = self.client.delete(f"/api/transactions/{tx['id']}/")
        self.assertEqual(resp.json(), {"paid_payment": "0.00"})

        resp = self.client.get(f"/api/packages/{pkg['id']}/transactions/", {"with_deleted": "1"})
        self.assertTrue(resp.json()[0]["is_deleted"])

        resp = self.client.post(f"/api/packages/{pkg['id']}/reconcile/")
        self.assertEqual(resp.status_code, 200)
        self.assertFalse(resp.json()["changed"])

    def test_session_actions_and_agenda(self) -> None:
        pkg = self.create_package(self.patient["id"])
        first = Session.objects.get(buyed_package_id=pkg["id"], session_number=1)

        resp = self.client.post(f"/api/sessions/{first.id}/complete/")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["status"], "completed")
        self.assertEqual(self.client.post(f"/api/sessions/{first.id}/complete/").status_code, 409)

        second = Session.objects.get(buyed_package_id=pkg["id"], session_number=2)
        resp = self.client.post(f"/api/sessions/{second.id}/reschedule/", {"new_date": "2024-01-14"}, format="json")
        self.assertEqual(resp.json()["scheduled_date"], "2024-01-15")

        self.assertEqual(self.client.get("/api/sessions/").status_code, 400)
        resp = self.client.get("/api/sessions/", {"start": "2024-01-01", "end": "2024-01-31"})
        self.assertEqual(resp.status_code, 200)
        self.assertEqual([s["scheduled_date"] for s in resp.json()], ["2024-01-15", "2024-01-15"])
        self.assertEqual(resp.json()[0]["patient_name"], "Carla Dias")

    def test_regenerate_and_delete(self) -> None:
        pkg = self.create_package(self.patient["id"])
        resp = self.client.patch(f"/api/packages/{pkg['id']}/", {"no_of_sessions": 4}, format="json")
        self.assertEqual(resp.status_code, 200)

        resp = self.client.post(
            f"/api/packages/{pkg['id']}/regenerate-sessions/", {"already_completed": 1}, format="json"
        )
        self.assertEqual(resp.status_code, 201)
        self.assertEqual(len(resp.json()), 4)

        resp = self.client.delete(f"/api/packages/{pkg['id']}/")
        self.assertEqual(resp.json(), {"patients": 0, "packages": 1, "sessions": 4, "transactions": 0})

    def test_dashboard_limit(self) -> None:
        self.create_package(self.patient["id"])
        self.create_package(self.patient["id"], start_date="2024-02-05")

        resp = self.client.get("/api/packages/", {"limit": 1})
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(len(resp.json()), 1)

        for bad in ("-1", "0", "abc"):
            resp = self.client.get("/api/packages/", {"limit": bad})
            self.assertEqual(resp.status_code, 400, bad)


class HealthApiTests(TestCase):
    def test_healthz_is_public(self) -> None:
        resp = APIClient().get("/api/healthz/")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["status"], "ok")

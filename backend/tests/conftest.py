import asyncio
import base64
import io
import json
import uuid

import httpx
import pytest
from fastapi.testclient import TestClient
from PIL import Image
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker

from docgen.database import get_db, init_db
from docgen.exceptions import DeliveryFailure
from docgen.main import app
from docgen.models import (
    Company, Customer, Invoice, InvoiceItem, Job, JobItem, JobPhoto, Payment,
    Profile, Quote, QuoteItem, Signature, SocialLink,
)
from docgen.services.mail_service import ResendMailer, get_mailer
from docgen.services.storage_service import StorageClient, get_storage

STORAGE_URL = "http://storage.test"
CREATED = "2025-01-05T14:30:00Z"


def _set_sqlite_pragmas(dbapi_conn, connection_record):
    cursor = dbapi_conn.cursor()
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def png_bytes(width=40, height=20, color=(200, 30, 30)) -> bytes:
    buf = io.BytesIO()
    Image.new("RGB", (width, height), color).save(buf, format="PNG")
    return buf.getvalue()


def png_data_url(width=40, height=20) -> str:
    return "data:image/png;base64," + base64.b64encode(png_bytes(width, height)).decode("ascii")


def run(coro):
    return asyncio.run(coro)


class FakeStorageBackend:
    """In-memory storage API: serves registered objects and signs private paths."""

    def __init__(self):
        self.objects: dict[str, bytes] = {}
        self.unsignable: set[str] = set()
        self.requests: list[httpx.Request] = []

    def put(self, path: str, content: bytes):
        self.objects[path] = content

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path
        if request.method == "POST" and path.startswith("/storage/v1/object/sign/"):
            object_path = path[len("/storage/v1/object/sign/"):]
            if object_path in self.unsignable:
                return httpx.Response(400, json={"error": "not found"})
            return httpx.Response(200, json={"signedURL": f"/object/sign/{object_path}?token=t"})
        for prefix in ("/storage/v1/object/public/", "/storage/v1/object/sign/"):
            if path.startswith(prefix):
                content = self.objects.get(path[len(prefix):])
                if content is not None:
                    return httpx.Response(200, content=content)
        return httpx.Response(404, text="missing")

    def client(self) -> StorageClient:
        return StorageClient(
            base_url=STORAGE_URL,
            service_key="service-key",
            transport=httpx.MockTransport(self.handler),
        )


class RecordingMailer(ResendMailer):
    def __init__(self, fail: bool = False):
        super().__init__(api_url="http://mail.test", api_key="test", sender="Test <noreply@test.dev>")
        self.fail = fail
        self.sent = []

    async def send(self, message):
        if self.fail:
            raise DeliveryFailure("Failed to send email: HTTP 500")
        self.sent.append(message)
        return f"msg-{len(self.sent)}"


@pytest.fixture
def test_db(tmp_path):
    db_path = tmp_path / "db.sqlite"
    init_db(db_path)
    engine = create_engine(
        f"sqlite:///{db_path}",
        connect_args={"check_same_thread": False},
    )
    event.listen(engine, "connect", _set_sqlite_pragmas)
    TestSession = sessionmaker(bind=engine, autoflush=False, autocommit=False)

    def override_get_db():
        db = TestSession()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestSession
    app.dependency_overrides.clear()
    engine.dispose()


@pytest.fixture
def db(test_db):
    session = test_db()
    yield session
    session.close()


@pytest.fixture
def storage_backend():
    return FakeStorageBackend()


@pytest.fixture
def storage(storage_backend):
    return storage_backend.client()


@pytest.fixture
def mailer():
    return RecordingMailer()


@pytest.fixture
def client(test_db, storage_backend, mailer):
    app.dependency_overrides[get_storage] = storage_backend.client
    app.dependency_overrides[get_mailer] = lambda: mailer
    with TestClient(app) as c:
        yield c


# --- seeding -----------------------------------------------------------------

def _id() -> str:
    return str(uuid.uuid4())


def add_company(db, **overrides) -> Company:
    values = dict(
        id=_id(), name="Acme Plumbing", email="office@acme.test", phone="555-0100",
        address="1 Main St", city="Springfield", state="IL", zip="62701",
        website="https://acme.test", created_at=CREATED,
    )
    values.update(overrides)
    company = Company(**values)
    db.add(company)
    db.commit()
    return company


def add_customer(db, company, **overrides) -> Customer:
    values = dict(
        id=_id(), company_id=company.id, name="Jane Customer", email="jane@example.com",
        phone="555-0199", address="9 Elm St", city="Shelbyville", state="IL", zip="62565",
    )
    values.update(overrides)
    customer = Customer(**values)
    db.add(customer)
    db.commit()
    return customer


def add_signature(db, data=None, **overrides) -> Signature:
    values = dict(
        id=_id(), signer_name="Jane Customer", signed_at="2025-01-06T09:15:00Z",
        signature_data=data or png_data_url(),
    )
    values.update(overrides)
    signature = Signature(**values)
    db.add(signature)
    db.commit()
    return signature


def _items(model, fk, parent_id, items):
    return [
        model(id=_id(), **{fk: parent_id}, description=d, quantity=q, unit_price=p, total=q * p)
        for d, q, p in items
    ]


def add_quote(db, company, customer=None, items=(("Replace faucet", 1, 150.0),), **overrides) -> Quote:
    values = dict(
        id=_id(), company_id=company.id, customer_id=customer.id if customer else None,
        quote_number="Q-1001", status="draft", subtotal=0, tax=0, total=0,
        valid_until="2025-02-05", created_at=CREATED,
    )
    values.update(overrides)
    quote = Quote(**values)
    db.add(quote)
    db.flush()
    db.add_all(_items(QuoteItem, "quote_id", quote.id, items))
    db.commit()
    return quote


def add_invoice(db, company, customer=None, items=(("Service call", 1, 100.0),), **overrides) -> Invoice:
    values = dict(
        id=_id(), company_id=company.id, customer_id=customer.id if customer else None,
        invoice_number="INV-2024-0042", status="draft", subtotal=0, tax=0, total=0,
        due_date="2025-02-04", created_at=CREATED,
    )
    values.update(overrides)
    invoice = Invoice(**values)
    db.add(invoice)
    db.flush()
    db.add_all(_items(InvoiceItem, "invoice_id", invoice.id, items))
    db.commit()
    return invoice


def add_job(db, company, customer=None, items=(), **overrides) -> Job:
    values = dict(
        id=_id(), company_id=company.id, customer_id=customer.id if customer else None,
        job_number="J-77", title="Water heater install", status="scheduled", priority="high",
        created_at=CREATED,
    )
    values.update(overrides)
    job = Job(**values)
    db.add(job)
    db.flush()
    db.add_all(_items(JobItem, "job_id", job.id, items))
    db.commit()
    return job


def add_photo(db, job, path, photo_type="before", caption=None, order=0, deleted_at=None) -> JobPhoto:
    photo = JobPhoto(
        id=_id(), job_id=job.id, photo_url=path, photo_type=photo_type,
        caption=caption, display_order=order, deleted_at=deleted_at,
    )
    db.add(photo)
    db.commit()
    return photo


def add_profile(db, company, **overrides) -> Profile:
    values = dict(id=_id(), company_id=company.id, full_name="Tom Tech", email="tom@acme.test")
    values.update(overrides)
    profile = Profile(**values)
    db.add(profile)
    db.commit()
    return profile


def add_social_link(db, company, platform, url, order=0, **flags) -> SocialLink:
    link = SocialLink(id=_id(), company_id=company.id, platform_name=platform, url=url, display_order=order, **flags)
    db.add(link)
    db.commit()
    return link


def add_payment(db, invoice, amount, status="completed", method="cash", **overrides) -> Payment:
    values = dict(
        id=_id(), invoice_id=invoice.id, amount=amount, method=method, status=status,
        payment_date="2025-01-10",
    )
    values.update(overrides)
    payment = Payment(**values)
    db.add(payment)
    db.commit()
    return payment


def sent_json(request: httpx.Request) -> dict:
    return json.loads(request.content)

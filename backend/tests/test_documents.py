import base64

import pytest

from conftest import add_company, add_customer, add_invoice, add_job, add_quote, add_signature, png_bytes
from docgen.config import settings
from docgen.models import Invoice, Job, Quote

URL = "/api/v1/documents/generate"


class TestDownload:
    def test_download_pdf(self, client, db):
        company = add_company(db)
        quote = add_quote(db, company)
        r = client.post(URL, json={"type": "quote", "documentId": quote.id, "action": "download"})
        assert r.status_code == 200
        data = r.json()
        assert data["success"] is True
        assert data["documentNumber"] == "Q-1001"
        assert base64.b64decode(data["pdfBase64"]).startswith(b"%PDF")
        assert "html" not in data

    def test_download_html(self, client, db):
        company = add_company(db)
        invoice = add_invoice(db, company)
        r = client.post(URL, json={
            "type": "invoice", "documentId": invoice.id, "action": "download", "format": "html",
        })
        assert r.status_code == 200
        data = r.json()
        assert data["documentNumber"] == "INV-2024-0042"
        assert "<!DOCTYPE html>" in data["html"]
        assert "pdfBase64" not in data

    def test_download_never_changes_status(self, client, db):
        company = add_company(db)
        quote = add_quote(db, company)
        client.post(URL, json={"type": "quote", "documentId": quote.id, "action": "download"})
        db.expire_all()
        assert db.get(Quote, quote.id).status == "draft"

    def test_bare_base64_signature(self, client, db):
        company = add_company(db)
        signature = add_signature(db, data=base64.b64encode(png_bytes()).decode("ascii"))
        quote = add_quote(db, company, signature_id=signature.id)
        r = client.post(URL, json={"type": "quote", "documentId": quote.id, "action": "download"})
        assert r.status_code == 200
        assert base64.b64decode(r.json()["pdfBase64"]).startswith(b"%PDF")

    def test_missing_document(self, client):
        r = client.post(URL, json={"type": "invoice", "documentId": "nope", "action": "download"})
        assert r.status_code == 404
        assert r.json() == {"error": "invoice not found"}

    def test_invalid_type_rejected(self, client):
        r = client.post(URL, json={"type": "receipt", "documentId": "x", "action": "download"})
        assert r.status_code == 400
        assert "error" in r.json()


class TestEmail:
    def test_recipient_required_before_lookup(self, client, mailer):
        r = client.post(URL, json={"type": "quote", "documentId": "does-not-exist", "action": "email"})
        assert r.status_code == 400
        assert r.json() == {"error": "Recipient email is required for email action"}
        assert mailer.sent == []

    @pytest.mark.parametrize("recipient", [
        "not-an-email",
        "jane doe@example.com",
        "jane@@example.com",
        "jane@example..com",
        "<x>@a.b",
    ])
    def test_malformed_recipient(self, client, db, mailer, recipient):
        company = add_company(db)
        quote = add_quote(db, company)
        r = client.post(URL, json={
            "type": "quote", "documentId": quote.id, "action": "email", "recipientEmail": recipient,
        })
        assert r.status_code == 400
        assert r.json()["error"].startswith("Invalid recipient email")
        assert mailer.sent == []

    def test_email_quote(self, client, db, mailer):
        company = add_company(db)
        customer = add_customer(db, company)
        quote = add_quote(db, company, customer)
        r = client.post(URL, json={
            "type": "quote", "documentId": quote.id, "action": "email", "recipientEmail": "jane@example.com",
        })
        assert r.status_code == 200
        assert r.json() == {"success": True, "message": "Email sent successfully"}

        [message] = mailer.sent
        assert message.to == ["jane@example.com"]
        assert message.subject == "Quote Q-1001 from Acme Plumbing"
        assert message.reply_to == "office@acme.test"
        [attachment] = message.attachments
        assert attachment.filename == "Q-1001.pdf"
        assert attachment.content.startswith(b"%PDF")
        assert "Hello Jane Customer," in message.html

        db.expire_all()
        assert db.get(Quote, quote.id).status == "sent"

    def test_repeat_email_keeps_sent(self, client, db, mailer):
        company = add_company(db)
        invoice = add_invoice(db, company)
        body = {"type": "invoice", "documentId": invoice.id, "action": "email", "recipientEmail": "a@b.co"}
        assert client.post(URL, json=body).status_code == 200
        assert client.post(URL, json=body).status_code == 200
        assert len(mailer.sent) == 2
        db.expire_all()
        assert db.get(Invoice, invoice.id).status == "sent"

    def test_only_drafts_advance(self, client, db):
        company = add_company(db)
        invoice = add_invoice(db, company, status="paid")
        client.post(URL, json={
            "type": "invoice", "documentId": invoice.id, "action": "email", "recipientEmail": "a@b.co",
        })
        db.expire_all()
        assert db.get(Invoice, invoice.id).status == "paid"

    def test_job_summary_status_untouched(self, client, db, mailer):
        company = add_company(db, email=None)
        job = add_job(db, company, status="draft")
        r = client.post(URL, json={
            "type": "job", "documentId": job.id, "action": "email", "recipientEmail": "a@b.co",
        })
        assert r.status_code == 200
        assert mailer.sent[0].subject == "Job Summary J-77 from Acme Plumbing"
        assert mailer.sent[0].reply_to is None
        db.expire_all()
        assert db.get(Job, job.id).status == "draft"

    def test_send_failure_leaves_status(self, client, db, mailer):
        mailer.fail = True
        company = add_company(db)
        quote = add_quote(db, company)
        r = client.post(URL, json={
            "type": "quote", "documentId": quote.id, "action": "email", "recipientEmail": "a@b.co",
        })
        assert r.status_code == 502
        assert "error" in r.json()
        db.expire_all()
        assert db.get(Quote, quote.id).status == "draft"


class TestServiceToken:
    def test_token_required_when_configured(self, client, db, monkeypatch):
        monkeypatch.setattr(settings, "service_token", "s3cret")
        company = add_company(db)
        quote = add_quote(db, company)
        body = {"type": "quote", "documentId": quote.id, "action": "download"}

        r = client.post(URL, json=body)
        assert r.status_code == 401
        assert r.json() == {"error": "Missing bearer token"}

        r = client.post(URL, json=body, headers={"Authorization": "Bearer wrong"})
        assert r.status_code == 401

        r = client.post(URL, json=body, headers={"Authorization": "Bearer s3cret"})
        assert r.status_code == 200

    def test_health(self, client):
        r = client.get("/health")
        assert r.status_code == 200
        assert r.json()["status"] == "ok"

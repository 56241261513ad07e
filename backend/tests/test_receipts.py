import base64
from decimal import Decimal

from conftest import add_company, add_customer, add_invoice, add_payment, png_bytes, run
from docgen.services.receipt_service import ReceiptService, summarize

URL = "/api/v1/payments/receipt"


def seed(db, total=200.0, late_fee=None, customer_email="jane@example.com"):
    company = add_company(db)
    customer = add_customer(db, company, email=customer_email)
    invoice = add_invoice(db, company, customer, total=total, late_fee_amount=late_fee)
    return company, customer, invoice


def receipt_texts(db, storage, mailer, payment_id):
    async def go():
        service = ReceiptService(db, storage, mailer)
        payment, invoice, company, customer = service._load(payment_id)
        return await service.render(payment, invoice, company, customer)
    return run(go()).texts()


class TestSummary:
    def test_late_fee_counts_toward_total(self, db):
        _, _, invoice = seed(db, total=200.0, late_fee=10.0)
        payment = add_payment(db, invoice, 150.0)
        summary = summarize(invoice, payment)
        assert summary.invoice_total == Decimal("210.00")
        assert summary.total_paid == Decimal("150.00")
        assert summary.remaining == Decimal("60.00")
        assert not summary.paid_in_full

    def test_only_completed_payments_count(self, db):
        _, _, invoice = seed(db, total=200.0)
        add_payment(db, invoice, 100.0, status="pending")
        payment = add_payment(db, invoice, 200.0)
        summary = summarize(invoice, payment)
        assert summary.total_paid == Decimal("200.00")
        assert summary.paid_in_full

    def test_overpayment_clamps_to_zero(self, db):
        _, _, invoice = seed(db, total=50.0)
        payment = add_payment(db, invoice, 80.0)
        assert summarize(invoice, payment).remaining == Decimal("0.00")


class TestReceiptRender:
    def test_paid_in_full(self, db, storage, mailer):
        _, _, invoice = seed(db, total=200.0)
        payment = add_payment(db, invoice, 200.0, method="check", notes="Thanks for the check")
        texts = receipt_texts(db, storage, mailer, payment.id)
        assert "PAYMENT RECEIPT" in texts
        assert "Acme Plumbing" in texts
        assert "INV-2024-0042" in texts
        assert "January 10, 2025" in texts
        assert payment.id[:8].upper() in texts
        assert "$200.00" in texts
        assert "PAID IN FULL" in texts
        assert "Partial Payment - Balance Due" not in texts
        assert "Thanks for the check" in texts
        assert "Thank you for your payment!" in texts

    def test_partial_payment(self, db, storage, mailer):
        _, _, invoice = seed(db, total=200.0)
        payment = add_payment(db, invoice, 75.0)
        texts = receipt_texts(db, storage, mailer, payment.id)
        assert "Partial Payment - Balance Due" in texts
        assert "$125.00" in texts
        assert "PAID IN FULL" not in texts


class TestReceiptApi:
    def test_download(self, client, db):
        _, _, invoice = seed(db)
        payment = add_payment(db, invoice, 200.0)
        r = client.post(URL, json={"paymentId": payment.id, "action": "download"})
        assert r.status_code == 200
        data = r.json()
        assert data["success"] is True
        assert data["fileName"] == f"Receipt-INV-2024-0042-{payment.id[:8].upper()}.pdf"
        assert base64.b64decode(data["pdf"]).startswith(b"%PDF")

    def test_email_falls_back_to_customer(self, client, db, mailer):
        _, _, invoice = seed(db)
        payment = add_payment(db, invoice, 50.0)
        r = client.post(URL, json={"paymentId": payment.id, "action": "email"})
        assert r.status_code == 200
        assert r.json() == {"success": True, "message": "Receipt sent successfully"}

        [message] = mailer.sent
        assert message.to == ["jane@example.com"]
        assert message.subject == "Payment Receipt - INV-2024-0042"
        assert message.reply_to == "office@acme.test"
        assert message.attachments[0].filename.startswith("Receipt-INV-2024-0042-")
        assert "Remaining Balance:</strong> $150.00" in message.html

    def test_explicit_recipient_wins(self, client, db, mailer):
        _, _, invoice = seed(db)
        payment = add_payment(db, invoice, 200.0)
        r = client.post(URL, json={"paymentId": payment.id, "action": "email", "recipientEmail": "ap@corp.example.com"})
        assert r.status_code == 200
        assert mailer.sent[0].to == ["ap@corp.example.com"]
        assert "Paid in Full" in mailer.sent[0].html

    def test_no_recipient_anywhere(self, client, db, mailer, storage_backend):
        storage_backend.put("company-logos/acme/logo.png", png_bytes())
        company = add_company(db, logo_url="acme/logo.png")
        customer = add_customer(db, company, email=None)
        invoice = add_invoice(db, company, customer, total=200.0)
        payment = add_payment(db, invoice, 200.0)
        r = client.post(URL, json={"paymentId": payment.id, "action": "email"})
        assert r.status_code == 400
        assert r.json() == {"error": "No recipient email provided"}
        assert mailer.sent == []
        # Rejected before the receipt is drawn
        assert storage_backend.requests == []

    def test_invalid_recipient(self, client, db, mailer):
        _, _, invoice = seed(db)
        payment = add_payment(db, invoice, 200.0)
        r = client.post(URL, json={"paymentId": payment.id, "action": "email", "recipientEmail": "jane@@example.com"})
        assert r.status_code == 400
        assert r.json()["error"].startswith("Invalid recipient email")
        assert mailer.sent == []

    def test_missing_payment(self, client):
        r = client.post(URL, json={"paymentId": "nope", "action": "download"})
        assert r.status_code == 404
        assert r.json() == {"error": "Payment not found"}

    def test_missing_customer(self, client, db):
        company = add_company(db)
        invoice = add_invoice(db, company, total=100.0)
        payment = add_payment(db, invoice, 100.0)
        r = client.post(URL, json={"paymentId": payment.id, "action": "download"})
        assert r.status_code == 400
        assert r.json() == {"error": "Missing related data"}

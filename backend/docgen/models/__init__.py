from docgen.models.company import Company, SocialLink
from docgen.models.customer import Customer, Profile
from docgen.models.signature import Signature
from docgen.models.job import Job, JobItem, JobPhoto
from docgen.models.quote import Quote, QuoteItem
from docgen.models.invoice import Invoice, InvoiceItem
from docgen.models.payment import Payment

__all__ = [
    "Company", "SocialLink", "Customer", "Profile", "Signature",
    "Job", "JobItem", "JobPhoto", "Quote", "QuoteItem",
    "Invoice", "InvoiceItem", "Payment",
]

import sqlite3
from pathlib import Path
from sqlalchemy import create_engine, event
from sqlalchemy.orm import DeclarativeBase, sessionmaker

from docgen.config import settings


class Base(DeclarativeBase):
    pass


def _set_sqlite_pragmas(dbapi_conn, connection_record):
    cursor = dbapi_conn.cursor()
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def get_engine(db_path: Path | None = None):
    path = db_path or settings.db_path
    engine = create_engine(
        f"sqlite:///{path}",
        connect_args={"check_same_thread": False},
    )
    event.listen(engine, "connect", _set_sqlite_pragmas)
    return engine


engine = get_engine()
SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False)


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


SCHEMA_SQL = """\
-- ============================================================
-- TENANTS
-- ============================================================
CREATE TABLE IF NOT EXISTS companies (
    id                         TEXT PRIMARY KEY,
    name                       TEXT NOT NULL,
    email                      TEXT,
    phone                      TEXT,
    address                    TEXT,
    city                       TEXT,
    state                      TEXT,
    zip                        TEXT,
    website                    TEXT,
    logo_url                   TEXT,
    brand_primary_color        TEXT,
    default_payment_method     TEXT,
    payment_terms_days         INTEGER,
    late_fee_percentage        REAL,
    quote_number_prefix        TEXT NOT NULL DEFAULT 'Q',
    invoice_number_prefix      TEXT NOT NULL DEFAULT 'INV',
    job_number_prefix          TEXT NOT NULL DEFAULT 'J',
    pdf_show_logo              INTEGER,
    pdf_show_notes             INTEGER,
    pdf_show_signature         INTEGER,
    pdf_show_line_item_details INTEGER,
    pdf_show_job_photos        INTEGER,
    pdf_show_quote_photos      INTEGER,
    pdf_show_invoice_photos    INTEGER,
    pdf_terms_conditions       TEXT,
    pdf_footer_text            TEXT,
    email_job_body             TEXT,
    email_quote_body           TEXT,
    email_invoice_body         TEXT,
    created_at                 TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%SZ','now'))
);

CREATE TABLE IF NOT EXISTS company_social_links (
    id              TEXT PRIMARY KEY,
    company_id      TEXT NOT NULL REFERENCES companies(id) ON DELETE CASCADE,
    platform_name   TEXT NOT NULL,
    url             TEXT NOT NULL,
    icon_url        TEXT,
    display_order   INTEGER NOT NULL DEFAULT 0,
    show_on_invoice INTEGER NOT NULL DEFAULT 1,
    show_on_quote   INTEGER NOT NULL DEFAULT 1,
    show_on_job     INTEGER NOT NULL DEFAULT 1,
    show_on_email   INTEGER NOT NULL DEFAULT 1
);

CREATE INDEX IF NOT EXISTS idx_social_links_company ON company_social_links(company_id);

CREATE TABLE IF NOT EXISTS customers (
    id         TEXT PRIMARY KEY,
    company_id TEXT NOT NULL REFERENCES companies(id) ON DELETE CASCADE,
    name       TEXT NOT NULL,
    email      TEXT,
    phone      TEXT,
    address    TEXT,
    city       TEXT,
    state      TEXT,
    zip        TEXT
);

CREATE TABLE IF NOT EXISTS profiles (
    id         TEXT PRIMARY KEY,
    company_id TEXT REFERENCES companies(id) ON DELETE SET NULL,
    full_name  TEXT,
    email      TEXT NOT NULL
);

-- ============================================================
-- SIGNATURES
-- ============================================================
CREATE TABLE IF NOT EXISTS signatures (
    id             TEXT PRIMARY KEY,
    signer_name    TEXT NOT NULL,
    signed_at      TEXT NOT NULL,
    signature_data TEXT NOT NULL
);

-- ============================================================
-- JOBS
-- ============================================================
CREATE TABLE IF NOT EXISTS jobs (
    id                      TEXT PRIMARY KEY,
    company_id              TEXT NOT NULL REFERENCES companies(id) ON DELETE CASCADE,
    customer_id             TEXT,
    job_number              TEXT NOT NULL,
    title                   TEXT NOT NULL,
    description             TEXT,
    status                  TEXT NOT NULL DEFAULT 'draft'
                            CHECK(status IN ('draft','scheduled','in_progress','completed','invoiced','paid')),
    priority                TEXT NOT NULL DEFAULT 'medium'
                            CHECK(priority IN ('low','medium','high','urgent')),
    assigned_to             TEXT,
    scheduled_start         TEXT,
    scheduled_end           TEXT,
    actual_start            TEXT,
    actual_end              TEXT,
    subtotal                REAL,
    discount_type           TEXT,
    discount_value          REAL,
    tax                     REAL,
    total                   REAL,
    notes                   TEXT,
    completion_signature_id TEXT,
    created_at              TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%SZ','now'))
);

CREATE TABLE IF NOT EXISTS job_items (
    id          TEXT PRIMARY KEY,
    job_id      TEXT NOT NULL REFERENCES jobs(id) ON DELETE CASCADE,
    description TEXT NOT NULL,
    quantity    INTEGER NOT NULL DEFAULT 1 CHECK(quantity >= 0),
    unit_price  REAL NOT NULL DEFAULT 0,
    total       REAL NOT NULL DEFAULT 0
);

CREATE INDEX IF NOT EXISTS idx_job_items_job ON job_items(job_id);

CREATE TABLE IF NOT EXISTS job_photos (
    id            TEXT PRIMARY KEY,
    job_id        TEXT NOT NULL REFERENCES jobs(id) ON DELETE CASCADE,
    photo_url     TEXT NOT NULL,
    photo_type    TEXT NOT NULL DEFAULT 'other'
                  CHECK(photo_type IN ('before','after','other')),
    caption       TEXT,
    display_order INTEGER,
    deleted_at    TEXT
);

CREATE INDEX IF NOT EXISTS idx_job_photos_job ON job_photos(job_id);

-- ============================================================
-- QUOTES
-- ============================================================
CREATE TABLE IF NOT EXISTS quotes (
    id             TEXT PRIMARY KEY,
    company_id     TEXT NOT NULL REFERENCES companies(id) ON DELETE CASCADE,
    customer_id    TEXT,
    quote_number   TEXT NOT NULL,
    status         TEXT NOT NULL DEFAULT 'draft',
    subtotal       REAL NOT NULL DEFAULT 0,
    discount_type  TEXT,
    discount_value REAL,
    tax            REAL NOT NULL DEFAULT 0,
    total          REAL NOT NULL DEFAULT 0,
    notes          TEXT,
    valid_until    TEXT,
    job_id         TEXT REFERENCES jobs(id) ON DELETE SET NULL,
    signature_id   TEXT,
    created_at     TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%SZ','now'))
);

CREATE TABLE IF NOT EXISTS quote_items (
    id          TEXT PRIMARY KEY,
    quote_id    TEXT NOT NULL REFERENCES quotes(id) ON DELETE CASCADE,
    description TEXT NOT NULL,
    quantity    INTEGER NOT NULL DEFAULT 1 CHECK(quantity >= 0),
    unit_price  REAL NOT NULL DEFAULT 0,
    total       REAL NOT NULL DEFAULT 0
);

CREATE INDEX IF NOT EXISTS idx_quote_items_quote ON quote_items(quote_id);

-- ============================================================
-- INVOICES
-- ============================================================
CREATE TABLE IF NOT EXISTS invoices (
    id              TEXT PRIMARY KEY,
    company_id      TEXT NOT NULL REFERENCES companies(id) ON DELETE CASCADE,
    customer_id     TEXT,
    invoice_number  TEXT NOT NULL,
    status          TEXT NOT NULL DEFAULT 'draft',
    subtotal        REAL NOT NULL DEFAULT 0,
    discount_type   TEXT,
    discount_value  REAL,
    tax             REAL NOT NULL DEFAULT 0,
    total           REAL NOT NULL DEFAULT 0,
    late_fee_amount REAL,
    notes           TEXT,
    due_date        TEXT,
    job_id          TEXT REFERENCES jobs(id) ON DELETE SET NULL,
    signature_id    TEXT,
    created_at      TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%SZ','now'))
);

CREATE TABLE IF NOT EXISTS invoice_items (
    id          TEXT PRIMARY KEY,
    invoice_id  TEXT NOT NULL REFERENCES invoices(id) ON DELETE CASCADE,
    description TEXT NOT NULL,
    quantity    INTEGER NOT NULL DEFAULT 1 CHECK(quantity >= 0),
    unit_price  REAL NOT NULL DEFAULT 0,
    total       REAL NOT NULL DEFAULT 0
);

CREATE INDEX IF NOT EXISTS idx_invoice_items_invoice ON invoice_items(invoice_id);

-- ============================================================
-- PAYMENTS
-- ============================================================
CREATE TABLE IF NOT EXISTS payments (
    id           TEXT PRIMARY KEY,
    invoice_id   TEXT NOT NULL REFERENCES invoices(id) ON DELETE CASCADE,
    amount       REAL NOT NULL,
    method       TEXT NOT NULL,
    status       TEXT NOT NULL DEFAULT 'completed',
    payment_date TEXT NOT NULL,
    notes        TEXT
);

CREATE INDEX IF NOT EXISTS idx_payments_invoice ON payments(invoice_id);
"""


# Columns added after v0.1; SCHEMA_SQL already has them, so these only touch older stores
MIGRATIONS = [
    # v0.2: tenant-specific brand color for canvas headers
    ("companies", "brand_primary_color", "ALTER TABLE companies ADD COLUMN brand_primary_color TEXT"),
]


def _columns(conn: sqlite3.Connection, table: str) -> set[str]:
    return {row[1] for row in conn.execute(f"PRAGMA table_info({table})")}


def init_db(db_path: Path | None = None):
    path = db_path or settings.db_path
    conn = sqlite3.connect(str(path))
    conn.executescript(SCHEMA_SQL)
    for table, column, ddl in MIGRATIONS:
        if column not in _columns(conn, table):
            conn.execute(ddl)
            conn.commit()
    conn.close()

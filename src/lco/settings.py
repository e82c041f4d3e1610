import os

# Source site
CGA_BASE_URL = "https://cga.ct.gov"
SENATE_LISTING_URL = f"{CGA_BASE_URL}/asp/CGAAmendProc/CGASenateAmendRptDisp.asp"
HOUSE_LISTING_URL = f"{CGA_BASE_URL}/asp/CGAAmendProc/CGAHouseAmendRptDisp.asp"

# Sort by date, ascending
LISTING_FORM_DATA = {"optSortby": "D", "optSortOrder": "Asc"}

# Caption of the LCO column in the listing's header row
LCO_HEADER_TOKEN = "LCO #"

# Qdrant configuration
USE_CLOUD_QDRANT = os.environ.get("USE_CLOUD_QDRANT", "false").lower() == "true"

QDRANT_HOST = os.environ.get("QDRANT_HOST", "http://localhost:6333")
QDRANT_GRPC_PORT = int(os.environ.get("QDRANT_GRPC_PORT", "6334"))
QDRANT_API_KEY = os.environ.get("QDRANT_API_KEY", None)

QDRANT_CLOUD_URL = os.environ.get("QDRANT_CLOUD_URL")
QDRANT_CLOUD_API_KEY = os.environ.get("QDRANT_CLOUD_API_KEY")

# Table (collection) names
SENATE_AMENDMENTS_TABLE = os.environ.get("SENATE_AMENDMENTS_TABLE", "senate_amendments")
HOUSE_AMENDMENTS_TABLE = os.environ.get("HOUSE_AMENDMENTS_TABLE", "house_amendments")
BILLS_TABLE = os.environ.get("BILLS_TABLE", "bills")

# Maximum items per batch write
BATCH_WRITE_LIMIT = 25

# "assume-empty" treats a failed scan as an empty table, "abort" skips the partition
RECONCILE_ON_READ_FAILURE = os.environ.get("RECONCILE_ON_READ_FAILURE", "assume-empty")

BILL_CONCURRENCY = int(os.environ.get("BILL_CONCURRENCY", "4"))

# HTTP
# cga.ct.gov serves an incomplete certificate chain, so verification is off by default
VERIFY_TLS = os.environ.get("VERIFY_TLS", "false").lower() == "true"
HTTP_TIMEOUT = float(os.environ.get("HTTP_TIMEOUT", "30"))
HTTP_CACHE_ENABLED = os.environ.get("HTTP_CACHE_ENABLED", "false").lower() == "true"

# Mail
SMTP_HOST = os.environ.get("SMTP_HOST")
SMTP_PORT = int(os.environ.get("SMTP_PORT", "587"))
SMTP_USERNAME = os.environ.get("SMTP_USERNAME")
SMTP_PASSWORD = os.environ.get("SMTP_PASSWORD")
FROM_EMAIL = os.environ.get("FROM_EMAIL")
TO_EMAILS = [e.strip() for e in os.environ.get("TO_EMAILS", "").split(",") if e.strip()]

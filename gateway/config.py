import os


HTTP_HOST = os.getenv("HTTP_HOST", "0.0.0.0")
HTTP_PORT = int(os.getenv("HTTP_PORT", "80"))

# Base URL of the node's HTTP RPC
NODE_URL = os.getenv("NODE_URL", "http://127.0.0.1:8008").rstrip("/")
NODE_REQUEST_TIMEOUT = float(os.getenv("NODE_REQUEST_TIMEOUT", "30"))

VIEWER_BASE = os.getenv("VIEWER_BASE", "/view/")
if not VIEWER_BASE.startswith("/") or not VIEWER_BASE.endswith("/"):
    raise ValueError("VIEWER_BASE must start and end with '/'")

# Exit the process when the node cannot create an invitation
FAIL_FAST = os.getenv("GATEWAY_FAIL_FAST", "1").strip().lower() not in ("0", "false", "no", "")

LOG_LEVEL = (os.getenv("GATEWAY_LOG_LEVEL") or os.getenv("LOG_LEVEL") or "INFO").upper()
LOG_FILE = os.getenv("GATEWAY_LOG_FILE", "").strip()
LOG_MAX_BYTES = int(os.getenv("GATEWAY_LOG_MAX_BYTES", str(10 * 1024 * 1024)))
LOG_BACKUP_COUNT = int(os.getenv("GATEWAY_LOG_BACKUP_COUNT", "5"))

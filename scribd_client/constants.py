"""
Constants for Scribd client library.
Wire names and error codes used by the Scribd REST API.
"""

# Service endpoints
API_URL = "http://api.scribd.com/api"
SLURP_URL = "http://www.scribd.com/slurp"

# Request parameter names
PARAM_METHOD = "method"
PARAM_API_KEY = "api_key"
PARAM_API_SIG = "api_sig"
PARAM_SESSION_KEY = "session_key"
PARAM_MY_USER_ID = "my_user_id"
PARAM_FILE = "file"

# Phantom users are only passed to document management methods
DOCUMENT_NAMESPACE = "docs."

# Text encoding used for the api_sig source string
SIGNATURE_ENCODING = "utf-8"

# Response status values
STATUS_OK = "ok"
STATUS_UNKNOWN = "unknown"

# Error codes raised on the client side
ERR_NO_API_KEY = 10000
ERR_NO_SECRET_KEY = 10001
ERR_NO_PUBLISHER_ID = 10004
ERR_UNEXPECTED = 666

ERROR_MESSAGES = {
    ERR_NO_API_KEY: "No API key was specified.",
    ERR_NO_SECRET_KEY: "Signing is enforced but no secret key was specified.",
    ERR_NO_PUBLISHER_ID: "No publisher id was specified.",
}

# Multipart upload framing
MULTIPART_BOUNDARY_PREFIX = "----------"
DEFAULT_CONTENT_TYPE = "application/octet-stream"
UPLOAD_CHUNK_SIZE = 4096

USER_AGENT = "scribd-client Python Library"

# Default configuration values
DEFAULT_CONFIG = {
    'api_url': API_URL,
    'enforce_signing': False,
    'publisher_id': None,
    'proxy': None,
    'user_agent': USER_AGENT,
    'timeout': 30,              # HTTP timeout in seconds for simple calls
    'temp_dir': None,           # staging directory for stream uploads
    'max_workers': 2,           # threads for asynchronous uploads
}

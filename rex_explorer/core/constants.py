"""
System-wide constants for the repository explorer.
"""

from enum import Enum


# =============================================================================
# Enums
# =============================================================================


class TraversalStatus(str, Enum):
    """Lifecycle of one pre-traversal / filter / confirm cycle."""

    IDLE = "idle"
    PENDING = "pending"
    CANCELLED = "cancelled"
    COMPLETE = "complete"


class CandidateCategory(str, Enum):
    """Categories of candidate types offered before a traversal."""

    ENTITY = "entity"
    RELATIONSHIP = "relationship"
    CLASSIFICATION = "classification"


class InstanceCategory(str, Enum):
    """Kinds of instance that can be the focus of the explorer."""

    ENTITY = "entity"
    RELATIONSHIP = "relationship"


class MessageLevel(str, Enum):
    """Severity of a message shown to the user."""

    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


# =============================================================================
# API Constants
# =============================================================================

API_VERSION = "v1"
API_PREFIX = f"/api/{API_VERSION}"

# View-service endpoints, unversioned for compatibility with existing clients
PRE_TRAVERSAL_PATH = "/api/instances/rex-pre-traversal"
TRAVERSAL_PATH = "/api/instances/rex-traversal"

# Paths forwarded verbatim to the metadata platform
PROXIED_PREFIXES = ("servers", "open-metadata/admin-services")

# Answered by any running platform; used by the readiness check
PLATFORM_ORIGIN_PATH = "open-metadata/platform-services/users/{user_id}/server-platform/origin"

# =============================================================================
# Envelope Constants
# =============================================================================

HTTP_OK = 200
HTTP_BAD_REQUEST = 400

PRE_TRAVERSAL_DEPTH = 1

NOTHING_NEW_MESSAGE = "No additional objects were returned in the traversal"

# Entity properties tried, in order, when choosing a display label
LABEL_PROPERTIES = ("displayName", "name", "qualifiedName")

# Headers never forwarded by the platform proxy
HOP_BY_HOP_HEADERS = frozenset(
    {
        "connection",
        "keep-alive",
        "proxy-authenticate",
        "proxy-authorization",
        "te",
        "trailers",
        "transfer-encoding",
        "upgrade",
        "host",
        "content-length",
    }
)

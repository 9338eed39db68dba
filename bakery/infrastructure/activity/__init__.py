"""Client-side activity tracking: sanitization, batching and delivery."""

from .batcher import (
    ActivityBatcher,
    NavigationContext,
    current_navigation,
    navigation_context,
)
from .sanitizer import (
    REDACTED,
    is_sensitive_field,
    sanitize_details,
    sanitize_form_data,
    to_json_compatible,
)
from .transport import (
    ActivityDeliveryError,
    ActivityRejectedError,
    ActivityTransport,
    HttpActivityTransport,
    encode_batch,
    is_permanent_rejection,
)

__all__ = [
    "ActivityBatcher",
    "ActivityDeliveryError",
    "ActivityRejectedError",
    "ActivityTransport",
    "HttpActivityTransport",
    "NavigationContext",
    "REDACTED",
    "current_navigation",
    "encode_batch",
    "is_permanent_rejection",
    "is_sensitive_field",
    "navigation_context",
    "sanitize_details",
    "sanitize_form_data",
    "to_json_compatible",
]

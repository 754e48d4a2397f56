"""
ChromiQ Session ID Utilities
Generate unique palette session IDs for log correlation.
"""
import uuid
from datetime import datetime


def generate_session_id() -> str:
    """
    Generate a unique palette session ID.

    Returns:
        Unique session ID string
    """
    timestamp = datetime.now().strftime("%Y%m%d%H%M%S")
    short_uuid = str(uuid.uuid4())[:8]
    return f"pal-{timestamp}-{short_uuid}"


def extract_timestamp_from_session_id(session_id: str) -> str:
    """
    Extract timestamp from session ID.

    Args:
        session_id: Session ID string

    Returns:
        Timestamp string or empty if not found
    """
    parts = session_id.split("-")
    if len(parts) >= 2 and parts[0] == "pal":
        return parts[1]
    return ""

"""
File upload utilities.
"""
import uuid
from typing import Optional

from docportal.core.config import settings


def get_file_extension(filename: str) -> str:
    """
    Get file extension.

    Args:
        filename: Name of file

    Returns:
        Lower-case file extension with its dot, or "" if there is none
    """
    return "." + filename.rsplit(".", 1)[1].lower() if "." in filename else ""


def is_allowed_file(filename: str) -> bool:
    """
    Check if file extension is allowed.

    Args:
        filename: Name of file

    Returns:
        True if file extension is allowed, False otherwise
    """
    return get_file_extension(filename) in settings.ALLOWED_FILE_EXTENSIONS


def generate_unique_filename(original_filename: str) -> str:
    """
    Generate a unique filename using UUID.

    Args:
        original_filename: Original filename

    Returns:
        Unique filename
    """
    return f"{uuid.uuid4()}{get_file_extension(original_filename)}"


def check_upload_file(filename: Optional[str], file_size: int) -> Optional[str]:
    """
    Validate an uploaded file.

    Args:
        filename: Client-supplied filename
        file_size: Size of the content in bytes

    Returns:
        Error message, or None if the file is acceptable
    """
    if not filename:
        return "No file selected"
    if not is_allowed_file(filename):
        allowed = ", ".join(settings.ALLOWED_FILE_EXTENSIONS)
        return f"File type not allowed. Allowed types: {allowed}"
    if file_size == 0:
        return "File is empty"
    if file_size > settings.MAX_UPLOAD_SIZE:
        return f"File size exceeds maximum allowed size of {settings.MAX_UPLOAD_SIZE} bytes"
    return None

"""
Utility functions for the PDF Q&A Backend.
"""

import functools
import inspect
import os
import random
import re
import time
import uuid
from typing import Any, Dict, Optional
from datetime import datetime, timezone
import logging

logger = logging.getLogger(__name__)

_LANGUAGE_TAG_RE = re.compile(r"^[A-Za-z]{2,3}([-_][A-Za-z0-9]{1,8})*$")


def generate_document_id() -> str:
    """Generate a unique document ID."""
    return str(uuid.uuid4())


def format_timestamp() -> str:
    """Get current UTC timestamp in ISO format."""
    return datetime.now(timezone.utc).isoformat()


def measure_time(func):
    """Decorator to measure function execution time. Works for coroutines too."""
    if inspect.iscoroutinefunction(func):
        @functools.wraps(func)
        async def async_wrapper(*args, **kwargs):
            start_time = time.perf_counter()
            try:
                return await func(*args, **kwargs)
            finally:
                execution_time = time.perf_counter() - start_time
                logger.info(f"{func.__name__} executed in {execution_time:.2f} seconds")
        return async_wrapper

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        start_time = time.perf_counter()
        try:
            return func(*args, **kwargs)
        finally:
            execution_time = time.perf_counter() - start_time
            logger.info(f"{func.__name__} executed in {execution_time:.2f} seconds")
    return wrapper


def sanitize_filename(filename: str) -> str:
    """Sanitize filename for safe storage."""
    # Remove or replace dangerous characters
    dangerous_chars = ['/', '\\', ':', '*', '?', '"', '<', '>', '|']
    sanitized = filename

    for char in dangerous_chars:
        sanitized = sanitized.replace(char, '_')

    # Limit length
    if len(sanitized) > 255:
        name, ext = sanitized.rsplit('.', 1) if '.' in sanitized else (sanitized, '')
        sanitized = name[:255-len(ext)-1] + ('.' + ext if ext else '')

    return sanitized


def build_storage_name(original_name: str, prefix: str = "pdf") -> str:
    """Unique on-disk name that keeps the upload's extension."""
    ext = os.path.splitext(sanitize_filename(original_name or ""))[1].lower() or ".pdf"
    unique_suffix = f"{int(time.time() * 1000)}-{random.randint(0, 10**9)}"
    return f"{prefix}-{unique_suffix}{ext}"


def clean_text(text: str) -> str:
    """Normalize whitespace in extracted text, keeping paragraph breaks."""
    if not text:
        return ""

    lines = [' '.join(line.split()) for line in text.splitlines()]
    text = '\n'.join(lines)
    text = re.sub(r'\n{3,}', '\n\n', text)

    return text.strip()


def normalize_language_tag(tag: Optional[str]) -> Optional[str]:
    """
    Reduce a language tag to its bare lowercase ISO code.

    "en-IN" -> "en", "zh-cn" -> "zh", "FR" -> "fr". Returns None for values that
    are not shaped like a language tag.
    """
    if tag is None:
        return None
    tag = tag.strip()
    if not tag or not _LANGUAGE_TAG_RE.match(tag):
        return None
    return re.split(r"[-_]", tag, maxsplit=1)[0].lower()


def log_processing_info(operation: str, details: Dict[str, Any]) -> None:
    """Log processing information."""
    logger.info(f"{operation}: {details}")


def handle_processing_error(operation: str, error: Exception, context: Dict[str, Any] = None) -> Dict[str, Any]:
    """Handle and log processing errors."""
    error_info = {
        'operation': operation,
        'error_type': type(error).__name__,
        'error_message': str(error),
        'timestamp': format_timestamp()
    }

    if context:
        error_info.update(context)

    logger.error(f"Processing error: {error_info}")
    return error_info

"""
Standardized API response envelopes for consistent data structure
"""
import math
from typing import Any, Dict, List, Optional
from datetime import datetime


def success_response(
    data: Any = None,
    message: Optional[str] = None
) -> Dict[str, Any]:
    """Create a success response"""
    response = {"success": True}
    if message is not None:
        response["message"] = message
    if data is not None:
        response["data"] = data
    response["timestamp"] = datetime.utcnow().isoformat()
    return response


def error_response(
    message: str,
    errors: Optional[List[Dict[str, Any]]] = None,
    error_code: Optional[str] = None,
    details: Optional[Dict[str, Any]] = None
) -> Dict[str, Any]:
    """Create an error response"""
    response = {
        "success": False,
        "message": message,
    }
    if errors:
        response["errors"] = errors
    if error_code:
        response["error_code"] = error_code
    if details:
        response["details"] = details
    response["timestamp"] = datetime.utcnow().isoformat()
    return response


def pagination_meta(page: int, limit: int, total_items: int) -> Dict[str, Any]:
    """Exact pagination metadata for a page of ``limit`` rows"""
    total_pages = math.ceil(total_items / limit) if limit else 0

    return {
        "currentPage": page,
        "totalPages": total_pages,
        "totalProducts": total_items,
        "hasNextPage": page < total_pages,
        "hasPrevPage": page > 1
    }

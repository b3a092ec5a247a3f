"""
Success envelope shared by the resource endpoints
"""

from typing import Any, Optional


def success(data: Any, results: Optional[int] = None) -> dict:
    """{"status": "success", ["results": n,] "data": {"data": ...}}"""
    body = {"status": "success"}
    if results is not None:
        body["results"] = results
    body["data"] = {"data": data}
    return body

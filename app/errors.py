"""
Error taxonomy for the catalog API.

Each error knows its HTTP status and the JSON body it renders to, so the
handlers in ``main`` stay a one-liner per type.
"""

from typing import Any, Dict, List


class CatalogError(Exception):
    status_code = 500

    def body(self) -> Dict[str, Any]:
        raise NotImplementedError


class ValidationFailed(CatalogError):
    """Field-level validation failure, rendered as a problem body."""

    status_code = 400

    def __init__(self, errors: Dict[str, List[str]]):
        super().__init__("validation failed")
        self.errors = errors

    def body(self) -> Dict[str, Any]:
        return {
            "type": "Validation Error",
            "title": "Invalid parameters provided",
            "status": 400,
            "detail": "There were validation errors with the request parameters.",
            "errors": self.errors,
        }


class BadRequest(CatalogError):
    status_code = 400

    def body(self) -> Dict[str, Any]:
        return {
            "status": "bad request",
            "message": "Invalid query params passed",
            "status_code": 400,
        }


class Unauthorized(CatalogError):
    status_code = 401

    def __init__(self, action: str):
        super().__init__(action)
        self.action = action

    def body(self) -> Dict[str, Any]:
        return {
            "error": "Unauthorized",
            "message": f"You must be authenticated to {self.action} a product.",
        }


class ProductNotFound(CatalogError):
    status_code = 404

    def __init__(self, product_id: str):
        super().__init__(product_id)
        self.product_id = product_id

    def body(self) -> Dict[str, Any]:
        return {
            "error": "Product not found",
            "message": f"The product with ID {self.product_id} does not exist.",
        }


class NoSearchResults(CatalogError):
    """A search whose requested page is empty. Distinct from a validation problem."""

    status_code = 404

    def body(self) -> Dict[str, Any]:
        return {
            "type": "Not Found",
            "title": "No products found",
            "status": 404,
            "detail": "No products match the search criteria.",
        }


class InternalError(CatalogError):
    status_code = 500

    def body(self) -> Dict[str, Any]:
        return {
            "status": "error",
            "message": "Internal server error",
            "status_code": 500,
        }

"""Domain errors raised by services and mapped to HTTP responses in main.py."""

from fastapi import status


class ShopError(Exception):
    status_code: int = status.HTTP_400_BAD_REQUEST

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail

    def extra(self) -> dict:
        return {}


class NotFoundError(ShopError):
    status_code = status.HTTP_404_NOT_FOUND


class ConflictError(ShopError):
    status_code = status.HTTP_409_CONFLICT


class InvalidOperationError(ShopError):
    status_code = status.HTTP_400_BAD_REQUEST


class ValidationError(ShopError):
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY


class CategoryInUseError(ConflictError):
    """Delete blocked because products still reference the category subtree."""

    def __init__(self, detail: str, affected_products: list[dict]):
        super().__init__(detail)
        self.affected_products = affected_products

    def extra(self) -> dict:
        return {"affectedProducts": self.affected_products}

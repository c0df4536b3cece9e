"""
Product lookups (decoration only).
"""
from marketplace.model.product import Product
from marketplace.crud.base import CRUDBase


class CRUDProduct(CRUDBase[Product, dict, dict]):
    """Product-specific CRUD operations."""


product_crud = CRUDProduct(Product)

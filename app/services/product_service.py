# app/services/product_service.py
import re
import uuid

from sqlalchemy.exc import IntegrityError
from sqlmodel import Session

from app.core.errors import ConflictError, NotFoundError
from app.core.permissions import Action, authorize
from app.models.product import Product
from app.models.user import User
from app.repositories.product_repo import ProductRepository
from app.schemas.product import ProductCreate, ProductUpdate


class ProductService:
    """
    Business logic for the catalog.

    Responsibilities:
      - slug generation & uniqueness
      - admin-only writes (via the authorization policy)

    Stock written here is an explicit stock-take by an admin; checkout and
    cancellation go through InventoryLedger instead.
    """

    def __init__(self, repo: ProductRepository):
        self.repo = repo

    # ----- Helpers -----

    @staticmethod
    def _slugify(raw: str) -> str:
        """
        Basic slugification:
          - lowercase
          - non-alphanumeric -> '-'
          - collapse multiple '-'
          - strip leading/trailing '-'
        """
        value = raw.strip().lower()
        value = re.sub(r"[^a-z0-9]+", "-", value)
        value = re.sub(r"-+", "-", value)
        value = value.strip("-")
        return value or "product"

    def _ensure_unique_slug(self, session: Session, base_slug: str) -> str:
        """
        Ensure slug is unique by appending -2, -3, ... if needed.
        """
        slug = base_slug
        i = 2
        while self.repo.get_by_slug(session, slug) is not None:
            slug = f"{base_slug}-{i}"
            i += 1
        return slug

    # ----- Products -----

    def list_products(
        self,
        session: Session,
        user: User | None,
        skip: int = 0,
        limit: int = 50,
        only_active: bool = True,
    ) -> list[Product]:
        # inactive products are visible to admins only
        if not only_active and (user is None or user.role != "admin"):
            only_active = True
        return self.repo.list(session, skip=skip, limit=limit, only_active=only_active)

    def get_product(self, session: Session, product_id: uuid.UUID) -> Product:
        product = self.repo.get_by_id(session, product_id)
        if not product:
            raise NotFoundError("Product not found")
        return product

    def create_product(
        self,
        session: Session,
        user: User,
        payload: ProductCreate,
    ) -> Product:
        """
        Create a new product with a unique slug.

        - If slug is provided => slugify & ensure unique.
        - Else => slugify from name & ensure unique.
        """
        authorize(user, Action.MANAGE_CATALOG)
        raw_slug = payload.slug or payload.name
        slug = self._ensure_unique_slug(session, self._slugify(raw_slug))

        product = Product(
            name=payload.name,
            slug=slug,
            description=payload.description,
            price=payload.price,
            stock_on_hand=payload.stock_on_hand,
            is_active=payload.is_active,
            image_url=payload.image_url,
        )
        return self.repo.create(session, product)

    def update_product(
        self,
        session: Session,
        user: User,
        product_id: uuid.UUID,
        payload: ProductUpdate,
    ) -> Product:
        """
        Partial update of a product.

        - If slug is changed, enforce uniqueness.
        """
        authorize(user, Action.MANAGE_CATALOG)
        product = self.get_product(session, product_id)

        if payload.slug is not None:
            new_base_slug = self._slugify(payload.slug)
            if new_base_slug != product.slug:
                product.slug = self._ensure_unique_slug(session, new_base_slug)

        for field in ("name", "description", "price", "stock_on_hand", "is_active", "image_url"):
            value = getattr(payload, field)
            if value is not None:
                setattr(product, field, value)

        return self.repo.update(session, product)

    def delete_product(
        self,
        session: Session,
        user: User,
        product_id: uuid.UUID,
    ) -> None:
        """
        Delete a product that no cart, order or review refers to.
        """
        authorize(user, Action.MANAGE_CATALOG)
        product = self.get_product(session, product_id)
        try:
            self.repo.delete(session, product)
        except IntegrityError:
            session.rollback()
            raise ConflictError(
                "Product is referenced by carts, orders or reviews; deactivate it instead"
            )

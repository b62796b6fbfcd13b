"""
Product aggregate data access.

A product aggregate is the ``Product`` row joined with its brand, plus the
rows it owns (images, variations, FAQs) and the rows it is associated with
(subcategories, active discounts, active event discounts). Reads assemble the
aggregate from independent child queries; every write to the aggregate runs
in a single transaction.
"""
from sqlalchemy.orm import Session
from sqlalchemy import and_, exists, func, desc, select
from datetime import date, datetime, time, timedelta
from decimal import Decimal
from typing import Any, Dict, List, Optional
import logging

from core.exceptions import ResourceNotFoundError, ValidationError, VariationInUseError
from database.base import row_to_dict
from models.brand import ProductBrand
from models.category import SubCategory
from models.discount import Discount, EventHasProduct
from models.order import CartHasProduct, Order, OrderHasProductVariation, OrderHistory
from models.product import FAQ, Product, ProductImage, ProductSubCategory, ProductVariation
from schemas.product import (
    CollectionChanges,
    FaqIn,
    ProductAssociations,
    ProductCreate,
    ProductUpdate,
    ProductUpdateResult,
    VariationIn,
)
from services.discount import (
    active_window,
    get_active_discounts_by_product_id,
    get_active_event_discounts_by_product_id,
    get_discounts_by_product_id,
    is_discount_active,
)

logger = logging.getLogger(__name__)

TOP_SOLD_LIMIT = 5
SALES_WINDOW_DAYS = 30
PAID_STATUS = "paid"

# --------------------------
# Aggregate assembly
# --------------------------

def _product_query(db: Session, org_mail: str):
    """Product rows of the tenant, left-joined with their brand"""
    return db.query(
        Product,
        ProductBrand.brand_name,
        ProductBrand.brand_image_url,
        ProductBrand.short_description
    ).outerjoin(
        ProductBrand,
        and_(Product.brand_id == ProductBrand.id, ProductBrand.org_mail == org_mail)
    ).filter(Product.org_mail == org_mail)

def _product_row_to_dict(row) -> Dict[str, Any]:
    product, brand_name, brand_image_url, short_description = row
    data = row_to_dict(product)
    data["brand_name"] = brand_name
    data["brand_image_url"] = brand_image_url
    data["brand_short_description"] = short_description
    return data

def get_product_images(db: Session, org_mail: str, product_id: int) -> List[Dict[str, Any]]:
    images = db.query(ProductImage).filter(
        ProductImage.product_id == product_id,
        ProductImage.org_mail == org_mail
    ).order_by(ProductImage.id).all()
    return [row_to_dict(i) for i in images]

def get_product_variations(db: Session, org_mail: str, product_id: int) -> List[Dict[str, Any]]:
    """Get the variations of a product, each flagged with whether it was ever ordered"""
    has_orders = exists().where(OrderHasProductVariation.variation_id == ProductVariation.id)
    rows = db.query(ProductVariation, has_orders.label("has_orders")).filter(
        ProductVariation.product_id == product_id,
        ProductVariation.org_mail == org_mail
    ).order_by(ProductVariation.id).all()

    variations = []
    for variation, ordered in rows:
        data = row_to_dict(variation)
        data["has_orders"] = bool(ordered)
        variations.append(data)
    return variations

def get_product_faqs(db: Session, org_mail: str, product_id: int) -> List[Dict[str, Any]]:
    faqs = db.query(FAQ).filter(
        FAQ.product_id == product_id,
        FAQ.org_mail == org_mail
    ).order_by(FAQ.id).all()
    return [row_to_dict(f) for f in faqs]

def get_product_sub_categories(db: Session, org_mail: str, product_id: int) -> List[Dict[str, Any]]:
    sub_categories = db.query(SubCategory).join(
        ProductSubCategory,
        and_(SubCategory.id == ProductSubCategory.sub_category_id, ProductSubCategory.org_mail == org_mail)
    ).filter(
        ProductSubCategory.product_id == product_id,
        SubCategory.org_mail == org_mail
    ).order_by(SubCategory.id).all()
    return [row_to_dict(s) for s in sub_categories]

def _attach_children(db: Session, org_mail: str, product: Dict[str, Any], today: Optional[date]) -> Dict[str, Any]:
    product_id = product["id"]
    product["images"] = get_product_images(db, org_mail, product_id)
    product["variations"] = get_product_variations(db, org_mail, product_id)
    product["faqs"] = get_product_faqs(db, org_mail, product_id)
    product["subcategories"] = get_product_sub_categories(db, org_mail, product_id)
    product["discounts"] = get_active_discounts_by_product_id(db, org_mail, product_id, today)
    product["event_discounts"] = get_active_event_discounts_by_product_id(db, org_mail, product_id, today)
    return product

def product_exists(db: Session, org_mail: str, product_id: int) -> bool:
    return db.query(Product.id).filter(
        Product.id == product_id,
        Product.org_mail == org_mail
    ).first() is not None

def get_product_by_id(
    db: Session, org_mail: str, product_id: int, today: Optional[date] = None
) -> Optional[Dict[str, Any]]:
    """Get the full product aggregate, or None when the tenant has no such product"""
    row = _product_query(db, org_mail).filter(Product.id == product_id).first()
    if not row:
        return None
    return _attach_children(db, org_mail, _product_row_to_dict(row), today)

def get_all_products(db: Session, org_mail: str, today: Optional[date] = None) -> List[Dict[str, Any]]:
    """Get every product aggregate with product-level order and cart flags"""
    has_orders = exists().where(and_(
        OrderHasProductVariation.variation_id == ProductVariation.id,
        ProductVariation.product_id == Product.id,
        ProductVariation.org_mail == org_mail
    ))
    has_cart = exists().where(and_(
        CartHasProduct.variation_id == ProductVariation.id,
        ProductVariation.product_id == Product.id,
        ProductVariation.org_mail == org_mail
    ))
    rows = db.query(
        Product,
        ProductBrand.brand_name,
        ProductBrand.brand_image_url,
        ProductBrand.short_description,
        has_orders.label("has_orders"),
        has_cart.label("has_cart")
    ).outerjoin(
        ProductBrand,
        and_(Product.brand_id == ProductBrand.id, ProductBrand.org_mail == org_mail)
    ).filter(Product.org_mail == org_mail).order_by(Product.id).all()

    products = []
    for product, brand_name, brand_image_url, short_description, ordered, in_cart in rows:
        data = _product_row_to_dict((product, brand_name, brand_image_url, short_description))
        data["has_orders"] = bool(ordered)
        data["has_cart"] = bool(in_cart)
        products.append(_attach_children(db, org_mail, data, today))
    return products

def _with_images_and_discounts(db: Session, org_mail: str, rows, today: Optional[date]) -> List[Dict[str, Any]]:
    products = []
    for product, brand_name in rows:
        data = row_to_dict(product)
        data["brand_name"] = brand_name
        data["images"] = get_product_images(db, org_mail, product.id)
        data["discounts"] = get_active_discounts_by_product_id(db, org_mail, product.id, today)
        products.append(data)
    return products

def get_products_by_sub_category(
    db: Session, org_mail: str, sub_category_id: int, today: Optional[date] = None
) -> List[Dict[str, Any]]:
    rows = db.query(Product, ProductBrand.brand_name).join(
        ProductSubCategory,
        and_(Product.id == ProductSubCategory.product_id, ProductSubCategory.org_mail == org_mail)
    ).outerjoin(
        ProductBrand,
        and_(Product.brand_id == ProductBrand.id, ProductBrand.org_mail == org_mail)
    ).filter(
        ProductSubCategory.sub_category_id == sub_category_id,
        Product.org_mail == org_mail
    ).order_by(Product.id).all()
    return _with_images_and_discounts(db, org_mail, rows, today)

def get_products_by_brand(
    db: Session, org_mail: str, brand_id: int, today: Optional[date] = None
) -> List[Dict[str, Any]]:
    rows = db.query(Product, ProductBrand.brand_name).join(
        ProductBrand,
        and_(Product.brand_id == ProductBrand.id, ProductBrand.org_mail == org_mail)
    ).filter(
        Product.brand_id == brand_id,
        Product.org_mail == org_mail
    ).order_by(Product.id).all()
    return _with_images_and_discounts(db, org_mail, rows, today)

def get_discounted_products(db: Session, org_mail: str, today: Optional[date] = None) -> List[Dict[str, Any]]:
    """Get full aggregates of every product that has an active discount today"""
    product_ids = [
        row.id for row in db.query(Product.id).join(
            Discount,
            and_(Product.id == Discount.product_id, Discount.org_mail == org_mail)
        ).filter(
            Product.org_mail == org_mail,
            active_window(Discount, today)
        ).distinct().order_by(Product.id)
    ]

    products = []
    for product_id in product_ids:
        product = get_product_by_id(db, org_mail, product_id, today)
        if product is None:
            continue
        discounts = get_discounts_by_product_id(db, org_mail, product_id)
        product["discounts"] = [d for d in discounts if is_discount_active(d, today)]
        if product["discounts"]:
            products.append(product)
    return products

def get_product_count(db: Session, org_mail: str) -> int:
    return db.query(func.count(Product.id)).filter(Product.org_mail == org_mail).scalar()

def get_products_sold_qty(db: Session, org_mail: str) -> List[Dict[str, Any]]:
    """Get the five best selling products"""
    products = db.query(Product).filter(
        Product.sold_qty > 0,
        Product.org_mail == org_mail
    ).order_by(desc(Product.sold_qty), Product.id).limit(TOP_SOLD_LIMIT).all()
    return [
        {
            "id": p.id,
            "description": p.description,
            "sold_qty": p.sold_qty,
            "main_image_url": p.main_image_url,
            "selling_price": p.selling_price,
            "market_price": p.market_price,
        }
        for p in products
    ]

def get_product_sold_qty(db: Session, org_mail: str, product_id: int) -> Optional[Dict[str, Any]]:
    product = db.query(Product).filter(
        Product.id == product_id,
        Product.org_mail == org_mail
    ).first()
    if not product:
        return None
    return {"id": product.id, "description": product.description, "sold_qty": product.sold_qty}

def get_product_sales_info(
    db: Session, org_mail: str, product_id: int, today: Optional[date] = None
) -> Dict[str, Any]:
    """Units and revenue of paid orders over the last 30 days, with weekly buckets"""
    since = datetime.combine((today or date.today()) - timedelta(days=SALES_WINDOW_DAYS), time.min)
    rows = db.query(
        Order.date_time,
        OrderHasProductVariation.qty,
        OrderHasProductVariation.total_amount
    ).select_from(OrderHasProductVariation).join(
        Order,and_(OrderHasProductVariation.order_id == Order.id, Order.org_mail == org_mail)
    ).join(
        ProductVariation,
        and_(OrderHasProductVariation.variation_id == ProductVariation.id, ProductVariation.org_mail == org_mail)
    ).filter(
        ProductVariation.product_id == product_id,
        Order.date_time >= since,
        Order.payment_status == PAID_STATUS
    ).all()

    total_units = 0
    total_revenue = Decimal("0")
    weeks: Dict[str, Dict[str, Any]] = {}
    for ordered_at, qty, amount in rows:
        qty = qty or 0
        amount = Decimal(amount or 0)
        total_units += qty
        total_revenue += amount
        # Monday-first week number, e.g. "2024-07"
        week = ordered_at.strftime("%Y-%W")
        bucket = weeks.setdefault(week, {"week": week, "units_sold": 0, "revenue": Decimal("0")})
        bucket["units_sold"] += qty
        bucket["revenue"] += amount

    return {
        "total_units_sold_last_30_days": total_units,
        "total_revenue_last_30_days": total_revenue,
        "weekly_sales": [weeks[k] for k in sorted(weeks)],
    }

# --------------------------
# Child row writers
# --------------------------

def _add_image(db: Session, org_mail: str, product_id: int, image_url: str) -> ProductImage:
    image = ProductImage(product_id=product_id, image_url=image_url, org_mail=org_mail)
    db.add(image)
    return image

def _add_variation(db: Session, org_mail: str, product_id: int, variation: VariationIn) -> ProductVariation:
    # SIH mirrors Qty on every write
    row = ProductVariation(
        product_id=product_id,
        colour=variation.colour,
        size=variation.size,
        qty=variation.quantity,
        sih=variation.quantity,
        org_mail=org_mail
    )
    db.add(row)
    return row

def _add_faq(db: Session, org_mail: str, product_id: int, faq: FaqIn) -> FAQ:
    row = FAQ(product_id=product_id, question=faq.question, answer=faq.answer, org_mail=org_mail)
    db.add(row)
    return row

def _add_sub_category_links(db: Session, org_mail: str, product_id: int, sub_category_ids: List[int]) -> None:
    for sub_category_id in dict.fromkeys(sub_category_ids):
        db.add(ProductSubCategory(product_id=product_id, sub_category_id=sub_category_id, org_mail=org_mail))

# --------------------------
# Create
# --------------------------

def create_product(
    db: Session,
    org_mail: str,
    product_data: ProductCreate,
    associated: Optional[ProductAssociations] = None,
    today: Optional[date] = None
) -> Dict[str, Any]:
    """Insert a product with its images, variations, FAQs and subcategory links"""
    associated = associated or ProductAssociations()
    try:
        product = Product(**product_data.dict(), org_mail=org_mail)
        db.add(product)
        db.flush()

        for image_url in associated.images or []:
            _add_image(db, org_mail, product.id, image_url)
        for variation in associated.variations or []:
            _add_variation(db, org_mail, product.id, variation)
        for faq in associated.faqs or []:
            _add_faq(db, org_mail, product.id, faq)
        _add_sub_category_links(db, org_mail, product.id, associated.sub_category_ids or [])

        db.commit()
    except Exception as e:
        db.rollback()
        logger.error(f"Error creating product: {str(e)}")
        raise

    logger.info(f"Product created: {product.description} ({product.id}) [{org_mail}]")
    return get_product_by_id(db, org_mail, product.id, today)

# --------------------------
# Update / reconcile
# --------------------------

def reconcile_images(
    db: Session,
    org_mail: str,
    product_id: int,
    images: Optional[List[str]],
    deleted_images: Optional[List[str]]
) -> CollectionChanges:
    """Drop the listed URLs, then replace the whole set when a new one is supplied"""
    changes = CollectionChanges()
    if deleted_images:
        db.query(ProductImage).filter(
            ProductImage.product_id == product_id,
            ProductImage.image_url.in_(deleted_images),
            ProductImage.org_mail == org_mail
        ).delete(synchronize_session=False)
        changes.deleted.extend(deleted_images)

    if images is not None:
        existing = [
            row.image_url for row in db.query(ProductImage.image_url).filter(
                ProductImage.product_id == product_id,
                ProductImage.org_mail == org_mail
            )
        ]
        db.query(ProductImage).filter(
            ProductImage.product_id == product_id,
            ProductImage.org_mail == org_mail
        ).delete(synchronize_session=False)
        already_deleted = set(changes.deleted)
        changes.deleted.extend(url for url in existing if url not in already_deleted)

        added = [_add_image(db, org_mail, product_id, url) for url in images]
        db.flush()
        changes.inserted.extend(image.id for image in added)
    return changes

def _split_incoming(existing_ids: List[int], incoming) -> List[int]:
    incoming_ids = {item.id for item in incoming if item.id is not None}
    return [existing_id for existing_id in existing_ids if existing_id not in incoming_ids]

def reconcile_variations(
    db: Session, org_mail: str, product_id: int, variations: List[VariationIn]
) -> CollectionChanges:
    """Diff incoming variations against the stored ones.

    Stored variations missing from the incoming list are deleted unless any of
    them appears on an order line, in which case nothing is deleted and
    ``VariationInUseError`` is raised. Entries with an id are updated in place,
    entries without one are inserted.
    """
    changes = CollectionChanges()
    existing_ids = [
        row.id for row in db.query(ProductVariation.id).filter(
            ProductVariation.product_id == product_id,
            ProductVariation.org_mail == org_mail
        ).order_by(ProductVariation.id)
    ]
    to_delete = _split_incoming(existing_ids, variations)

    if to_delete:
        ordered = {
            row.variation_id for row in db.query(OrderHasProductVariation.variation_id).filter(
                OrderHasProductVariation.variation_id.in_(to_delete)
            ).distinct()
        }
        if ordered:
            logger.warning(f"Variations {sorted(ordered)} of product {product_id} have orders; keeping all [{org_mail}]")
            raise VariationInUseError(ordered)

        db.query(ProductVariation).filter(
            ProductVariation.id.in_(to_delete),
            ProductVariation.org_mail == org_mail
        ).delete(synchronize_session=False)
        changes.deleted.extend(to_delete)

    added = []
    for variation in variations:
        if variation.id is None:
            added.append(_add_variation(db, org_mail, product_id, variation))
            continue
        updated = db.query(ProductVariation).filter(
            ProductVariation.id == variation.id,
            ProductVariation.product_id == product_id,
            ProductVariation.org_mail == org_mail
        ).update({
            ProductVariation.colour: variation.colour,
            ProductVariation.size: variation.size,
            ProductVariation.qty: variation.quantity,
            ProductVariation.sih: variation.quantity,
        }, synchronize_session=False)
        if not updated:
            raise ResourceNotFoundError("Product variation", variation.id)
        changes.updated.append(variation.id)

    db.flush()
    changes.inserted.extend(row.id for row in added)
    return changes

def reconcile_faqs(db: Session, org_mail: str, product_id: int, faqs: List[FaqIn]) -> CollectionChanges:
    """Same diff as variations; FAQs are never referenced elsewhere so deletes are unguarded"""
    changes = CollectionChanges()
    existing_ids = [
        row.id for row in db.query(FAQ.id).filter(
            FAQ.product_id == product_id,
            FAQ.org_mail == org_mail
        ).order_by(FAQ.id)
    ]
    to_delete = _split_incoming(existing_ids, faqs)
    if to_delete:
        db.query(FAQ).filter(
            FAQ.id.in_(to_delete),
            FAQ.org_mail == org_mail
        ).delete(synchronize_session=False)
        changes.deleted.extend(to_delete)

    added = []
    for faq in faqs:
        if faq.id is None:
            added.append(_add_faq(db, org_mail, product_id, faq))
            continue
        updated = db.query(FAQ).filter(
            FAQ.id == faq.id,
            FAQ.product_id == product_id,
            FAQ.org_mail == org_mail
        ).update({FAQ.question: faq.question, FAQ.answer: faq.answer}, synchronize_session=False)
        if not updated:
            raise ResourceNotFoundError("FAQ", faq.id)
        changes.updated.append(faq.id)

    db.flush()
    changes.inserted.extend(row.id for row in added)
    return changes

def replace_sub_categories(
    db: Session, org_mail: str, product_id: int, sub_category_ids: List[int]
) -> CollectionChanges:
    """Full replace of the product's subcategory links"""
    existing = [
        row.sub_category_id for row in db.query(ProductSubCategory.sub_category_id).filter(
            ProductSubCategory.product_id == product_id,
            ProductSubCategory.org_mail == org_mail
        )
    ]
    # Links are re-added under the same composite key
    db.query(ProductSubCategory).filter(
        ProductSubCategory.product_id == product_id,
        ProductSubCategory.org_mail == org_mail
    ).delete(synchronize_session="fetch")
    _add_sub_category_links(db, org_mail, product_id, sub_category_ids)
    db.flush()
    return CollectionChanges(inserted=list(dict.fromkeys(sub_category_ids)), deleted=existing)

def update_product(
    db: Session,
    org_mail: str,
    product_id: int,
    product_data: ProductUpdate,
    associated: Optional[ProductAssociations] = None
) -> Optional[ProductUpdateResult]:
    """Apply a full scalar update and reconcile every supplied child collection.

    Returns None when the product does not exist for the tenant. Any failure,
    including ``VariationInUseError``, rolls back the whole update.
    """
    associated = associated or ProductAssociations()
    result = ProductUpdateResult(product_id=product_id)
    try:
        product = db.query(Product).filter(
            Product.id == product_id,
            Product.org_mail == org_mail
        ).first()
        if not product:
            return None

        for field, value in product_data.dict().items():
            setattr(product, field, value)
        db.flush()

        if associated.images is not None or associated.deleted_images is not None:
            result.changes["images"] = reconcile_images(
                db, org_mail, product_id, associated.images, associated.deleted_images
            )
        if associated.variations is not None:
            result.changes["variations"] = reconcile_variations(db, org_mail, product_id, associated.variations)
        if associated.faqs is not None:
            result.changes["faqs"] = reconcile_faqs(db, org_mail, product_id, associated.faqs)
        if associated.sub_category_ids is not None:
            result.changes["subcategories"] = replace_sub_categories(
                db, org_mail, product_id, associated.sub_category_ids
            )

        db.commit()
    except Exception as e:
        db.rollback()
        logger.error(f"Error updating product {product_id}: {str(e)}")
        raise

    logger.info(
        f"Product updated: {product_id} [{org_mail}] "
        + ", ".join(
            f"{name}: +{len(c.inserted)} ~{len(c.updated)} -{len(c.deleted)}"
            for name, c in result.changes.items()
        )
    )
    return result

def _set_product_column(db: Session, org_mail: str, product_id: int, column, value: str) -> bool:
    try:
        updated = db.query(Product).filter(
            Product.id == product_id,
            Product.org_mail == org_mail
        ).update({column: value}, synchronize_session=False)
        db.commit()
    except Exception as e:
        db.rollback()
        logger.error(f"Error updating product {product_id}: {str(e)}")
        raise
    return updated > 0

def toggle_product_status(db: Session, org_mail: str, product_id: int, status: Optional[str]) -> bool:
    if not status:
        raise ValidationError("Status is required", field="status")
    return _set_product_column(db, org_mail, product_id, Product.status, status)

def toggle_product_history_status(
    db: Session, org_mail: str, product_id: int, history_status: Optional[str]
) -> bool:
    if not history_status:
        raise ValidationError("History status is required", field="history_status")
    return _set_product_column(db, org_mail, product_id, Product.history_status, history_status)

# --------------------------
# Delete
# --------------------------

def delete_product(db: Session, org_mail: str, product_id: int) -> bool:
    """Delete a product and everything that depends on it.

    Orders containing any of the product's variations are removed entirely,
    together with their history and line items. Returns whether the product
    row itself existed.
    """
    variation_ids = select(ProductVariation.id).where(
        ProductVariation.product_id == product_id,
        ProductVariation.org_mail == org_mail
    )
    try:
        db.query(CartHasProduct).filter(
            CartHasProduct.variation_id.in_(variation_ids)
        ).delete(synchronize_session=False)

        order_ids = [
            row.order_id for row in db.query(OrderHasProductVariation.order_id).filter(
                OrderHasProductVariation.variation_id.in_(variation_ids)
            ).distinct()
        ]
        if order_ids:
            db.query(OrderHistory).filter(
                OrderHistory.order_id.in_(order_ids)
            ).delete(synchronize_session=False)
            db.query(OrderHasProductVariation).filter(
                OrderHasProductVariation.order_id.in_(order_ids)
            ).delete(synchronize_session=False)
            db.query(Order).filter(Order.id.in_(order_ids)).delete(synchronize_session=False)

        for model in (ProductSubCategory, ProductImage, ProductVariation, FAQ, Discount, EventHasProduct):
            db.query(model).filter(
                model.product_id == product_id,
                model.org_mail == org_mail
            ).delete(synchronize_session=False)

        deleted = db.query(Product).filter(
            Product.id == product_id,
            Product.org_mail == org_mail
        ).delete(synchronize_session=False)
        db.commit()
    except Exception as e:
        db.rollback()
        logger.error(f"Error deleting product {product_id}: {str(e)}")
        raise

    logger.info(f"Product deleted: {product_id} (orders removed: {len(order_ids)}) [{org_mail}]")
    return deleted > 0

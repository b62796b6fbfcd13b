from fastapi import APIRouter, Depends, File, Form, UploadFile, status
from sqlalchemy.orm import Session
from pydantic import ValidationError as PydanticValidationError
from decimal import Decimal
from typing import Any, Dict, List, Optional, Tuple
import json
import logging

from core.exceptions import ResourceNotFoundError, ValidationError
from core.response import deleted_response, success_response
from core.tenant import get_org_mail
from database.connection import get_db
from routers.upload import discard_images, save_image, validate_image_file
from schemas.product import (
    HistoryStatusUpdate,
    ProductAssociations,
    ProductCreate,
    ProductUpdate,
    StatusUpdate,
)
from services.product import (
    create_product,
    delete_product,
    get_all_products,
    get_discounted_products,
    get_product_by_id,
    get_product_count,
    get_product_sales_info,
    get_product_sold_qty,
    get_products_by_brand,
    get_products_by_sub_category,
    get_products_sold_qty,
    product_exists,
    toggle_product_history_status,
    toggle_product_status,
    update_product,
)

logger = logging.getLogger(__name__)

router = APIRouter()

# --------------------------
# Form decoding
# --------------------------

def decode_json_list(raw: Optional[str], field: str) -> Optional[List[Any]]:
    """Decode a JSON-stringified array sent as a form field; blank means absent"""
    if raw is None or not raw.strip():
        return None
    try:
        value = json.loads(raw)
    except ValueError:
        raise ValidationError(f"{field} must be a JSON encoded array", field=field)
    if not isinstance(value, list):
        raise ValidationError(f"{field} must be a JSON encoded array", field=field)
    return value

def _validated(model, **values):
    try:
        return model(**values)
    except PydanticValidationError as e:
        errors = [
            {"field": ".".join(str(x) for x in err["loc"]), "message": err["msg"]}
            for err in e.errors()
        ]
        raise ValidationError(f"Invalid {model.__name__} data", details={"errors": errors})

def product_form(
    description: str = Form(...),
    brand_id: Optional[int] = Form(None),
    market_price: Decimal = Form(...),
    selling_price: Decimal = Form(...),
    main_image_url: Optional[str] = Form(None),
    long_description: Optional[str] = Form(None),
    sih: int = Form(0),
    seasonal_offer: Optional[str] = Form(None),
    rush_delivery: Optional[str] = Form(None),
    for_you: Optional[str] = Form(None),
) -> Dict[str, Any]:
    return {
        "description": description,
        "brand_id": brand_id,
        "market_price": market_price,
        "selling_price": selling_price,
        "main_image_url": main_image_url,
        "long_description": long_description,
        "sih": sih,
        "seasonal_offer": seasonal_offer,
        "rush_delivery": rush_delivery,
        "for_you": for_you,
    }

def _store_uploads(
    main_image: Optional[UploadFile], sub_images: Optional[List[UploadFile]]
) -> Tuple[Optional[str], List[str]]:
    """Validate every uploaded image, then store them; nothing is written if one is rejected"""
    main = main_image if main_image is not None and main_image.filename else None
    subs = [f for f in sub_images or [] if f is not None and f.filename]
    for upload in ([main] if main else []) + subs:
        validate_image_file(upload)

    main_url = save_image(main) if main else None
    return main_url, [save_image(f) for f in subs]

# --------------------------
# Reads
# --------------------------

@router.get("/")
def list_products(org_mail: str = Depends(get_org_mail), db: Session = Depends(get_db)):
    """Get every product aggregate of the tenant"""
    return get_all_products(db, org_mail)

@router.get("/count")
def count_products(org_mail: str = Depends(get_org_mail), db: Session = Depends(get_db)):
    return {"total_products": get_product_count(db, org_mail)}

@router.get("/top-sold")
def top_sold_products(org_mail: str = Depends(get_org_mail), db: Session = Depends(get_db)):
    return get_products_sold_qty(db, org_mail)

@router.get("/discounted")
def discounted_products(org_mail: str = Depends(get_org_mail), db: Session = Depends(get_db)):
    return get_discounted_products(db, org_mail)

@router.get("/sub-category/{sub_category_id}")
def products_by_sub_category(
    sub_category_id: int,
    org_mail: str = Depends(get_org_mail),
    db: Session = Depends(get_db)
):
    return get_products_by_sub_category(db, org_mail, sub_category_id)

@router.get("/brand/{brand_id}")
def products_by_brand(brand_id: int, org_mail: str = Depends(get_org_mail), db: Session = Depends(get_db)):
    return get_products_by_brand(db, org_mail, brand_id)

@router.get("/{product_id}")
def get_product(product_id: int, org_mail: str = Depends(get_org_mail), db: Session = Depends(get_db)):
    """Get a product aggregate"""
    product = get_product_by_id(db, org_mail, product_id)
    if not product:
        raise ResourceNotFoundError("Product", product_id)
    return product

@router.get("/{product_id}/sold-qty")
def product_sold_qty(product_id: int, org_mail: str = Depends(get_org_mail), db: Session = Depends(get_db)):
    sold = get_product_sold_qty(db, org_mail, product_id)
    if not sold:
        raise ResourceNotFoundError("Product", product_id)
    return sold

@router.get("/{product_id}/sales-info")
def product_sales_info(product_id: int, org_mail: str = Depends(get_org_mail), db: Session = Depends(get_db)):
    return get_product_sales_info(db, org_mail, product_id)

# --------------------------
# Writes
# --------------------------

@router.post("/", status_code=status.HTTP_201_CREATED)
def create_catalog_product(
    form: Dict[str, Any] = Depends(product_form),
    variations: Optional[str] = Form(None),
    faqs: Optional[str] = Form(None),
    sub_category_ids: Optional[str] = Form(None, alias="subCategoryIds"),
    main_image: Optional[UploadFile] = File(None),
    sub_images: Optional[List[UploadFile]] = File(None),
    org_mail: str = Depends(get_org_mail),
    db: Session = Depends(get_db)
):
    """Create a product from a multipart form"""
    product_data = _validated(ProductCreate, **form)
    associated = _validated(
        ProductAssociations,
        variations=decode_json_list(variations, "variations"),
        faqs=decode_json_list(faqs, "faqs"),
        sub_category_ids=decode_json_list(sub_category_ids, "subCategoryIds"),
    )

    main_url, uploaded = _store_uploads(main_image, sub_images)
    stored = [main_url] + uploaded if main_url else uploaded
    if main_url:
        product_data.main_image_url = main_url
    if uploaded:
        associated.images = uploaded

    try:
        product = create_product(db, org_mail, product_data, associated)
    except Exception:
        discard_images(stored)
        raise
    return success_response(data=product, message="Product created successfully")

@router.put("/{product_id}")
def update_catalog_product(
    product_id: int,
    form: Dict[str, Any] = Depends(product_form),
    images: Optional[str] = Form(None),
    deleted_images: Optional[str] = Form(None, alias="deletedImages"),
    variations: Optional[str] = Form(None),
    faqs: Optional[str] = Form(None),
    sub_category_ids: Optional[str] = Form(None, alias="subCategoryIds"),
    main_image: Optional[UploadFile] = File(None),
    sub_images: Optional[List[UploadFile]] = File(None),
    org_mail: str = Depends(get_org_mail),
    db: Session = Depends(get_db)
):
    """Update a product and reconcile the child collections present in the form.

    ``images`` lists the URLs to keep; uploaded ``sub_images`` are appended to
    it and the result replaces the stored set.
    """
    product_data = _validated(ProductUpdate, **form)
    associated = _validated(
        ProductAssociations,
        images=decode_json_list(images, "images"),
        deleted_images=decode_json_list(deleted_images, "deletedImages"),
        variations=decode_json_list(variations, "variations"),
        faqs=decode_json_list(faqs, "faqs"),
        sub_category_ids=decode_json_list(sub_category_ids, "subCategoryIds"),
    )

    if not product_exists(db, org_mail, product_id):
        raise ResourceNotFoundError("Product", product_id)

    main_url, uploaded = _store_uploads(main_image, sub_images)
    stored = [main_url] + uploaded if main_url else uploaded
    if main_url:
        product_data.main_image_url = main_url
    if uploaded:
        associated.images = (associated.images or []) + uploaded

    try:
        result = update_product(db, org_mail, product_id, product_data, associated)
    except Exception:
        discard_images(stored)
        raise
    if result is None:
        discard_images(stored)
        raise ResourceNotFoundError("Product", product_id)

    return success_response(
        data={
            "product": get_product_by_id(db, org_mail, product_id),
            "changes": {name: c.dict() for name, c in result.changes.items()},
        },
        message="Product updated successfully"
    )

@router.patch("/{product_id}/status")
def update_product_status(
    product_id: int,
    payload: StatusUpdate,
    org_mail: str = Depends(get_org_mail),
    db: Session = Depends(get_db)
):
    if not toggle_product_status(db, org_mail, product_id, payload.status):
        raise ResourceNotFoundError("Product", product_id)
    return success_response(data={"id": product_id, "status": payload.status}, message="Product status updated")

@router.patch("/{product_id}/history-status")
def update_product_history_status(
    product_id: int,
    payload: HistoryStatusUpdate,
    org_mail: str = Depends(get_org_mail),
    db: Session = Depends(get_db)
):
    if not toggle_product_history_status(db, org_mail, product_id, payload.history_status):
        raise ResourceNotFoundError("Product", product_id)
    return success_response(
        data={"id": product_id, "history_status": payload.history_status},
        message="Product history status updated"
    )

@router.delete("/{product_id}")
def remove_product(product_id: int, org_mail: str = Depends(get_org_mail), db: Session = Depends(get_db)):
    """Delete a product together with everything that references it"""
    if not delete_product(db, org_mail, product_id):
        raise ResourceNotFoundError("Product", product_id)
    logger.info(f"Product {product_id} removed via API [{org_mail}]")
    return deleted_response("Product", product_id)

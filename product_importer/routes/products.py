from typing import Any

from fastapi import APIRouter, Body, Depends, HTTPException
from sqlalchemy.orm import Session
from product_importer.core.exceptions import StorageWriteFailure
from product_importer.database.connection import get_db
from product_importer.schemas.product import ImportResult, ProductResponse
from product_importer.services.import_service import import_selection, parse_selection
from product_importer.services.product_service import find_by_external_id, list_products


router = APIRouter(prefix="/products", tags=["Product Import"])

# IMPORT SELECTION
@router.post("/import", response_model=ImportResult)
def import_products(items: list[Any] = Body(...), db: Session = Depends(get_db)):
    try:
        return import_selection(db, parse_selection(items))
    except StorageWriteFailure as exc:
        raise HTTPException(500, exc.user_message)

# LIST
@router.get("/", response_model=list[ProductResponse])
def list_all(db: Session = Depends(get_db)):
    return list_products(db)

# GET BY EXTERNAL ID
@router.get("/{external_id}", response_model=ProductResponse)
def get(external_id: str, db: Session = Depends(get_db)):
    product = find_by_external_id(db, external_id)
    if not product:
        raise HTTPException(404, "Product not found")
    return product

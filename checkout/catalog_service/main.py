# checkout/catalog_service/main.py
from fastapi import FastAPI, HTTPException

app = FastAPI(title="Catalog & Media Service (dev mock)")


VARIANTS = {
    1: {"id": 1, "product_id": 10, "product_title": "Oak Desk", "selling_price": 199.99, "mrp": 249.00, "minimum_order_qty": 1, "stock": 5},
    2: {"id": 2, "product_id": 11, "product_title": "Wireless Mouse", "selling_price": 49.50, "mrp": 59.00, "minimum_order_qty": 2, "stock": 40},
    3: {"id": 3, "product_id": 12, "product_title": "27in Monitor", "selling_price": 899.00, "mrp": 999.00, "minimum_order_qty": 1, "stock": 1},
}

PRIMARY_IMAGES = {
    1: "/api/gallery/image/desk-oak-1",
    3: "/api/gallery/image/monitor-27-1",
}


@app.get("/variants/{variant_id}")
def get_variant(variant_id: int):
    variant = VARIANTS.get(variant_id)
    if not variant:
        raise HTTPException(status_code=404, detail="Product variant not found")
    return {k: v for k, v in variant.items() if k != "stock"}


@app.get("/variants/{variant_id}/primary-image")
def get_primary_image(variant_id: int):
    image = PRIMARY_IMAGES.get(variant_id)
    if not image:
        raise HTTPException(status_code=404, detail="No image for this variant")
    return {"variant_id": variant_id, "image": image}

# backend/routes/cart.py
from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.orm import Session
from database import get_db
from utils.tokenJWT import get_current_user
from utils.audit import write_log, client_ip
from utils.offers import CartLine
from utils import pos
from models.users import User
from models.product import Product
from models.customer import Customer
from models.cart import Cart, CartItem
from schemas.cart import CartAddItem, CartUpdateItem, CartOut, CartItemOut, CartCustomer
from schemas.sale import CheckoutRequest, SaleOut
from routes.offers import evaluate_cart
from routes.sales import create_sale, sale_to_out

router = APIRouter(prefix="/pos", tags=["POS"])


def _get_open_cart(db: Session, user_id: int) -> Cart:
    # Retrieve active cart or create a new one
    cart = db.query(Cart).filter(Cart.user_id == user_id, Cart.status == "open").first()
    if not cart:
        cart = Cart(user_id=user_id, status="open")
        db.add(cart)
        db.commit()
        db.refresh(cart)
    return cart


def _cart_to_out(db: Session, cart: Cart) -> CartOut:
    items_out = []
    lines = []

    for it in cart.items:
        product = it.product
        price = it.unit_price_snapshot
        items_out.append(CartItemOut(
            id=it.id,
            product_id=it.product_id,
            name=product.name if product else "",
            sku=product.sku if product else "",
            quantity=it.quantity,
            unit_price=pos.money(price),
            line_total=pos.line_total(it.quantity, price),
            available_stock=product.stock_quantity if product else 0,
        ))
        lines.append(CartLine(product_id=it.product_id, quantity=it.quantity, unit_price=price,
                              category_id=product.category_id if product else None))

    customer = None
    if cart.customer_id is not None:
        customer = db.query(Customer).filter(Customer.id == cart.customer_id).first()

    # Preview of the offers checkout would apply
    result = evaluate_cart(db, lines, customer)
    totals = pos.calculate_totals([(l.quantity, l.unit_price) for l in lines], discount=result.total_discount)

    return CartOut(
        id=cart.id,
        customer_id=cart.customer_id,
        items=items_out,
        item_count=sum(i.quantity for i in items_out),
        applied_offers=[
            {"offer_id": o.offer_id, "name": o.name, "offer_type": o.offer_type, "discount": o.discount}
            for o in result.applied
        ],
        **totals,
    )


@router.get("/cart", response_model=CartOut)
def get_cart(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    cart = _get_open_cart(db, current_user.id)
    return _cart_to_out(db, cart)


@router.post("/cart/add", response_model=CartOut)
def add_to_cart(
    payload: CartAddItem,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    cart = _get_open_cart(db, current_user.id)

    product = db.query(Product).filter(Product.id == payload.product_id).first()
    if not product:
        raise HTTPException(status_code=404, detail="Product not found")
    if not product.active:
        raise HTTPException(status_code=400, detail=f"{product.name} is not available for sale")

    item = db.query(CartItem).filter(
        CartItem.cart_id == cart.id, CartItem.product_id == payload.product_id
    ).first()

    # Validate stock availability including what is already in the cart
    try:
        pos.check_stock(product.name, product.stock_quantity, payload.quantity, in_cart=item.quantity if item else 0)
    except pos.InsufficientStockError as e:
        raise HTTPException(status_code=400, detail=str(e))

    if item:
        item.quantity += payload.quantity
    else:
        # Price snapshot at the moment of scanning
        item = CartItem(
            cart_id=cart.id,
            product_id=product.id,
            quantity=payload.quantity,
            unit_price_snapshot=product.price,
        )
        db.add(item)

    db.commit()
    db.refresh(cart)

    out = _cart_to_out(db, cart)
    write_log(
        db,
        user_id=current_user.id,
        action="CART_ADD",
        resource="cart",
        status="SUCCESS",
        ip=client_ip(request),
        meta={"product_id": product.id, "quantity": payload.quantity, "cart_items": len(out.items), "total": out.total},
    )
    return out


@router.put("/cart/items/{item_id}", response_model=CartOut)
def update_cart_item(
    item_id: int,
    payload: CartUpdateItem,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    cart = _get_open_cart(db, current_user.id)

    item = db.query(CartItem).filter(CartItem.id == item_id, CartItem.cart_id == cart.id).first()
    if not item:
        raise HTTPException(status_code=404, detail="Cart item not found")

    # Validate stock for the new quantity
    product = item.product
    try:
        pos.check_stock(product.name, product.stock_quantity, payload.quantity)
    except pos.InsufficientStockError as e:
        raise HTTPException(status_code=400, detail=str(e))

    item.quantity = payload.quantity
    db.commit()
    db.refresh(cart)

    out = _cart_to_out(db, cart)
    write_log(
        db,
        user_id=current_user.id,
        action="CART_UPDATE",
        resource="cart",
        status="SUCCESS",
        ip=client_ip(request),
        meta={"item_id": item_id, "quantity": payload.quantity, "total": out.total},
    )
    return out


@router.delete("/cart/items/{item_id}", response_model=CartOut)
def delete_cart_item(
    item_id: int,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    cart = _get_open_cart(db, current_user.id)

    item = db.query(CartItem).filter(CartItem.id == item_id, CartItem.cart_id == cart.id).first()
    if not item:
        raise HTTPException(status_code=404, detail="Cart item not found")

    db.delete(item)
    db.commit()
    db.refresh(cart)

    out = _cart_to_out(db, cart)
    write_log(
        db,
        user_id=current_user.id,
        action="CART_DELETE",
        resource="cart",
        status="SUCCESS",
        ip=client_ip(request),
        meta={"item_id": item_id, "cart_items": len(out.items), "total": out.total},
    )
    return out


# Empty the held cart
@router.delete("/cart", response_model=CartOut)
def clear_cart(
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    cart = _get_open_cart(db, current_user.id)
    removed = len(cart.items)
    cart.items.clear()
    cart.customer_id = None
    db.commit()
    db.refresh(cart)

    write_log(db, user_id=current_user.id, action="CART_CLEAR", resource="cart", status="SUCCESS",
              ip=client_ip(request), meta={"removed": removed})
    return _cart_to_out(db, cart)


# Attach a customer so loyalty offers and points apply
@router.put("/cart/customer", response_model=CartOut)
def set_cart_customer(
    payload: CartCustomer,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    cart = _get_open_cart(db, current_user.id)
    if payload.customer_id is not None:
        if not db.query(Customer.id).filter(Customer.id == payload.customer_id).first():
            raise HTTPException(status_code=404, detail="Customer not found")
    cart.customer_id = payload.customer_id
    db.commit()
    db.refresh(cart)
    return _cart_to_out(db, cart)


@router.post("/checkout", response_model=SaleOut, status_code=201)
def checkout(
    payload: CheckoutRequest,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    cart = _get_open_cart(db, current_user.id)
    if not cart.items:
        raise HTTPException(status_code=400, detail="Cart is empty")

    lines = [(it.product_id, it.quantity, it.unit_price_snapshot) for it in cart.items]
    customer_id = payload.customer_id if payload.customer_id is not None else cart.customer_id
    sale = create_sale(db, current_user, lines, payload, customer_id=customer_id, cart=cart)

    write_log(
        db,
        user_id=current_user.id,
        action="CHECKOUT",
        resource="sales",
        status="SUCCESS",
        ip=client_ip(request),
        meta={"sale_id": sale.id, "order_number": sale.order_number, "total": sale.total},
    )
    return sale_to_out(sale)

import streamlit as st
import pandas as pd

from data_integrator import LiveCollection
from domain.catalog import load_rows, sort_by_serial
from domain.models import Product
from domain.pricing import MIN_COMBO_PRODUCTS, combo_original_price, combo_savings
from element_component import confirmation_dialog, image_uploader, report, require_login
from services.combo_service import combo_product_from, delete_combo, is_combo_live, load_combos, save_combo
from utils.formatting import format_date, format_inr

st.set_page_config(page_title="Combo Orders", page_icon="🎁", layout="wide")

require_login()

st.sidebar.header("🎁 Combo Orders")
st.title("🎁 Combo Orders")

with LiveCollection("products") as products_live:
    products = sort_by_serial(load_rows(products_live.rows, Product.from_row))
products_by_id = {p.id: p for p in products}


def combo_form(combo):
    """
    Widgets live outside st.form so the original price and savings
    update as products and quantities change.
    """
    key = combo.id if combo else "new"
    name = st.text_input("Combo Name", value=combo.name if combo else "", key=f"combo_name_{key}")
    description = st.text_area("Description", value=combo.description if combo else "", key=f"combo_desc_{key}")

    existing = {p.product_id: p.quantity for p in combo.products} if combo else {}
    product_ids = st.multiselect(
        "Products",
        list(products_by_id),
        default=[pid for pid in existing if pid in products_by_id],
        format_func=lambda pid: f"{products_by_id[pid].name} ({format_inr(products_by_id[pid].price)})",
        key=f"combo_products_{key}",
    )

    chosen = []
    for pid in product_ids:
        qty = st.number_input(
            f"Quantity of {products_by_id[pid].name}",
            min_value=1,
            step=1,
            value=existing.get(pid, 1),
            key=f"combo_qty_{key}_{pid}",
        )
        chosen.append(combo_product_from(products_by_id[pid], int(qty)))

    combo_price = st.number_input(
        "Combo Price (₹)", min_value=0.0, step=1.0,
        value=float(combo.combo_price) if combo else 0.0, key=f"combo_price_{key}",
    )
    original = combo_original_price(chosen)
    savings = combo_savings(original, combo_price)
    col_1, col_2 = st.columns(2)
    col_1.metric("Original Price", format_inr(original))
    col_2.metric("Savings", format_inr(savings))
    if savings < 0:
        st.warning("Combo price is higher than buying the products separately")

    col_from, col_until = st.columns(2)
    valid_from = col_from.date_input(
        "Valid From", value=combo.valid_from.date() if combo and combo.valid_from else None,
        key=f"combo_from_{key}",
    )
    valid_until = col_until.date_input(
        "Valid Until", value=combo.valid_until.date() if combo and combo.valid_until else None,
        key=f"combo_until_{key}",
    )
    col_active, col_featured = st.columns(2)
    is_active = col_active.checkbox("Active", value=combo.is_active if combo else True, key=f"combo_active_{key}")
    is_featured = col_featured.checkbox("Featured", value=combo.is_featured if combo else False,
                                        key=f"combo_featured_{key}")
    urls = image_uploader("Combo image", key=f"combo_image_{key}")

    too_few = len(chosen) < MIN_COMBO_PRODUCTS
    if too_few:
        st.caption(f"Select at least {MIN_COMBO_PRODUCTS} products to create a combo")
    if st.button("Update Combo" if combo else "Create Combo", type="primary",
                 disabled=too_few, key=f"combo_save_{key}"):
        form = {
            "name": name,
            "description": description,
            "products": chosen,
            "combo_price": combo_price,
            "valid_from": valid_from,
            "valid_until": valid_until,
            "is_active": is_active,
            "is_featured": is_featured,
            "image_url": urls[0] if urls else (combo.image_url if combo else ""),
        }
        ok, msg, _ = save_combo(form, combo.id if combo else None)
        report(ok, msg)


with st.expander("➕ Create Combo"):
    combo_form(None)

ok, msg, combos = load_combos()
if not ok:
    st.error("Failed to load combos. Please try again.")
elif not combos:
    st.info("No combos yet. Bundle products together to offer a deal.")

for combo in combos:
    with st.container(border=True):
        badges = []
        if combo.is_featured:
            badges.append("⭐ Featured")
        badges.append("🟢 Live" if is_combo_live(combo) else "⚪ Not live")
        st.markdown(f"**{combo.name}** · {' · '.join(badges)}")
        if combo.description:
            st.caption(combo.description)
        st.dataframe(
            pd.DataFrame(
                [{"Product": p.product_name, "Qty": p.quantity, "Price": format_inr(p.price)} for p in combo.products]
            ),
            hide_index=True,
        )
        st.markdown(
            f"Original: ~~{format_inr(combo.original_price)}~~ · Combo: **{format_inr(combo.combo_price)}** · "
            f"Save {format_inr(combo.savings)}"
        )
        if combo.valid_from or combo.valid_until:
            st.caption(f"Valid {format_date(combo.valid_from)} to {format_date(combo.valid_until)}")
        with st.expander("Edit"):
            combo_form(combo)
        if st.button("Delete", key=f"combo_delete_{combo.id}"):
            confirmation_dialog(
                f"Delete combo '{combo.name}'?",
                lambda cid=combo.id: delete_combo(cid),
            )

import streamlit as st
import pandas as pd

from config import load_config
from data_integrator import LiveCollection
from domain.catalog import ALL, category_label, category_names, filter_products, load_rows, sort_by_serial
from domain.metrics import STOCK_LABELS, stock_status
from domain.models import Category, Product
from element_component import confirmation_dialog, image_uploader, report, require_login
from services.catalog_service import delete_product, save_product
from utils.formatting import format_inr

st.set_page_config(page_title="Products", page_icon="🧴", layout="wide")

require_login()
config = load_config()

st.sidebar.header("🧴 Products")
st.title("🧴 Products")

if "editing_product_id" not in st.session_state:
    st.session_state["editing_product_id"] = None

with LiveCollection("categories") as categories_live:
    categories = sort_by_serial(load_rows(categories_live.rows, Category.from_row))
names = category_names(categories)


def product_form(product):
    key = product.id if product else "new"
    if not categories:
        st.warning("Create a category before adding products.")
        return

    category_ids = list(names)
    current_category = product.category_id if product and product.category_id in names else None

    with st.form(f"product_form_{key}", clear_on_submit=product is None):
        col_1, col_2 = st.columns(2)
        with col_1:
            name = st.text_input("Product Name", value=product.name if product else "")
            category_id = st.selectbox(
                "Category",
                category_ids,
                index=category_ids.index(current_category) if current_category else None,
                format_func=names.get,
                placeholder="Choose a category",
            )
            sku = st.text_input("SKU", value=product.sku if product else "")
            serial_no = st.number_input(
                "Serial Number (0 = none)", min_value=0, step=1,
                value=(product.serial_no or 0) if product else 0,
            )
        with col_2:
            price = st.number_input("Price (₹)", min_value=0.0, step=1.0,
                                    value=float(product.price) if product else 0.0)
            sale_price = st.number_input("Sale Price (₹, 0 = none)", min_value=0.0, step=1.0,
                                         value=float(product.sale_price or 0) if product else 0.0)
            stock = st.number_input("Stock", step=1, value=product.stock if product else 0)
            is_active = st.checkbox("Active", value=product.is_active if product else True)

        description = st.text_area("Description", value=product.description if product else "")
        col_3, col_4 = st.columns(2)
        weight = col_3.text_input("Weight", value=product.weight if product else "")
        dimensions = col_4.text_input("Dimensions", value=product.dimensions if product else "")
        ingredients = st.text_area("Ingredients", value=product.ingredients if product else "")
        instructions = st.text_area("Instructions", value=product.instructions if product else "")
        submitted = st.form_submit_button("Update Product" if product else "Add Product", type="primary")

    urls = image_uploader("Product images", key=f"product_images_{key}", multiple=True)
    existing = list(product.images) if product else []
    if existing:
        st.image(existing, width=100)

    if submitted:
        form = {
            "name": name,
            "category_id": category_id,
            "sku": sku,
            "serial_no": serial_no,
            "price": price,
            "sale_price": sale_price,
            "stock": stock,
            "is_active": is_active,
            "description": description,
            "weight": weight,
            "dimensions": dimensions,
            "ingredients": ingredients,
            "instructions": instructions,
            "images": existing + [u for u in urls if u not in existing],
        }
        ok, msg, _ = save_product(form, product.id if product else None)
        if ok:
            st.session_state["editing_product_id"] = None
        report(ok, msg)


with st.expander("➕ Add Product"):
    product_form(None)


@st.fragment(run_every=config.live_refresh_seconds)
def products_body():
    with LiveCollection("products") as live:
        if not live.ok:
            st.error("Failed to load products. Please try again.")
            return
        products = sort_by_serial(load_rows(live.rows, Product.from_row))

    col_search, col_category = st.columns([3, 1])
    search = col_search.text_input("Search products...", key="product_search")
    category_filter = col_category.selectbox(
        "Category", [ALL] + list(names),
        format_func=lambda v: "All categories" if v == ALL else names[v],
        key="product_category_filter",
    )
    shown = filter_products(products, search, category_filter)

    if not shown:
        st.info("No products found" if search or category_filter != ALL
                else "No products yet. Add your first product above.")
        return

    df = pd.DataFrame(
        [
            {
                "Serial": p.serial_no if p.serial_no is not None else "-",
                "Name": p.name,
                "SKU": p.sku,
                "Category": category_label(p.category_id, names),
                "Price": format_inr(p.price),
                "Sale Price": format_inr(p.sale_price) if p.sale_price else "-",
                "Stock": p.stock,
                "Stock Status": STOCK_LABELS[stock_status(p.stock)],
                "Active": p.is_active,
            }
            for p in shown
        ]
    )
    st.dataframe(df, hide_index=True, width="stretch")

    labels = {p.id: f"{p.name} ({p.sku})" if p.sku else p.name for p in shown}
    selected_id = st.selectbox("Select product", list(labels), format_func=labels.get, key="product_select")
    col_edit, col_delete = st.columns(2)
    if col_edit.button("Edit"):
        st.session_state["editing_product_id"] = selected_id
        st.rerun()
    if col_delete.button("Delete"):
        confirmation_dialog(
            f"Delete product '{labels[selected_id]}'?",
            lambda: delete_product(selected_id),
        )


products_body()

editing_id = st.session_state["editing_product_id"]
if editing_id:
    with LiveCollection("products", filters=[("id", "eq", editing_id)]) as live:
        editing = load_rows(live.rows, Product.from_row)
    if editing:
        st.subheader(f"Edit {editing[0].name}")
        product_form(editing[0])
        if st.button("Cancel editing"):
            st.session_state["editing_product_id"] = None
            st.rerun()
    else:
        st.session_state["editing_product_id"] = None

import streamlit as st
import pandas as pd

from config import load_config
from data_integrator import LiveCollection
from domain.catalog import filter_categories, load_rows, sort_by_serial
from domain.models import UNKNOWN_LABEL, Category
from element_component import confirmation_dialog, image_uploader, report, require_login
from services.catalog_service import delete_category, save_category
from utils.formatting import format_date

st.set_page_config(page_title="Categories", page_icon="🗂️", layout="wide")

require_login()
config = load_config()

st.sidebar.header("🗂️ Categories")
st.title("🗂️ Categories")

if "editing_category_id" not in st.session_state:
    st.session_state["editing_category_id"] = None


def category_form(category):
    """Add form when `category` is None, edit form otherwise."""
    key = category.id if category else "new"
    with st.form(f"category_form_{key}", clear_on_submit=category is None):
        name = st.text_input("Category Name", value=category.name if category else "")
        description = st.text_area("Description", value=category.description if category else "")
        serial_no = st.number_input(
            "Serial Number (0 = none)",
            min_value=0,
            step=1,
            value=(category.serial_no or 0) if category else 0,
        )
        is_active = st.checkbox("Active", value=category.is_active if category else True)
        submitted = st.form_submit_button("Update Category" if category else "Add Category", type="primary")

    urls = image_uploader("Category image", key=f"category_image_{key}")
    if category and category.image_url and not urls:
        st.image(category.image_url, width=120)

    if submitted:
        form = {
            "name": name,
            "description": description,
            "serial_no": serial_no,
            "is_active": is_active,
            "image_url": urls[0] if urls else (category.image_url if category else ""),
        }
        ok, msg, _ = save_category(form, category.id if category else None)
        if ok:
            st.session_state["editing_category_id"] = None
        report(ok, msg)


with st.expander("➕ Add Category"):
    category_form(None)


@st.fragment(run_every=config.live_refresh_seconds)
def categories_body():
    with LiveCollection("categories") as live:
        if not live.ok:
            st.error("Failed to load categories. Please try again.")
            return
        categories = sort_by_serial(load_rows(live.rows, Category.from_row))

    search = st.text_input("Search categories...", key="category_search")
    shown = filter_categories(categories, search)

    if not shown:
        st.info("No categories found" if search else "No categories yet. Add your first category above.")
        return

    df = pd.DataFrame(
        [
            {
                "Serial": c.serial_no if c.serial_no is not None else "-",
                "Name": c.name,
                "Description": c.description,
                "Active": c.is_active,
                "Created": format_date(c.created_at),
            }
            for c in shown
        ]
    )
    st.dataframe(df, hide_index=True, width="stretch")

    labels = {c.id: c.name for c in shown}
    selected_id = st.selectbox("Select category", list(labels), format_func=labels.get, key="category_select")
    col_edit, col_delete = st.columns(2)
    if col_edit.button("Edit"):
        st.session_state["editing_category_id"] = selected_id
        st.rerun()
    if col_delete.button("Delete"):
        confirmation_dialog(
            f"Delete category '{labels[selected_id]}'? Products in it will show as {UNKNOWN_LABEL}.",
            lambda: delete_category(selected_id),
        )


categories_body()

editing_id = st.session_state["editing_category_id"]
if editing_id:
    with LiveCollection("categories", filters=[("id", "eq", editing_id)]) as live:
        editing = load_rows(live.rows, Category.from_row)
    if editing:
        st.subheader(f"Edit {editing[0].name}")
        category_form(editing[0])
        if st.button("Cancel editing"):
            st.session_state["editing_category_id"] = None
            st.rerun()
    else:
        st.session_state["editing_category_id"] = None

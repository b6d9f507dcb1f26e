"""
Streamlit UI for the Product Pricing Engine.

Features:
- Product configurator with widgets per attribute type
- Live price, cost and margin with warnings and calculation trace
- Catalog overview with catalog health checks
- Price sheet: bulk pricing of configurations with CSV export
"""
import streamlit as st
import pandas as pd
import sys
import json
from pathlib import Path
from datetime import datetime

# Add src to path for imports
src_path = Path(__file__).parent.parent.parent
if str(src_path) not in sys.path:
    sys.path.insert(0, str(src_path))

from product_pricing.config.settings import configure_logging, get_settings
from product_pricing.engine.models import AttributeType
from product_pricing.services.catalog_service import CatalogService
from product_pricing.services.price_sheet import build_price_sheet


st.set_page_config(
    page_title="Product Pricing",
    layout="wide",
    initial_sidebar_state="expanded"
)


@st.cache_resource
def get_catalog():
    """Get cached catalog instance."""
    settings = get_settings()
    configure_logging(settings)
    catalog = CatalogService(settings.catalog_path)
    catalog.rounding = settings.rounding_mode
    return catalog


try:
    catalog = get_catalog()
    settings = get_settings()
except (OSError, ValueError) as e:
    st.error(f"System Error: {e}")
    st.stop()


def attribute_widget(attribute):
    """Render the input for one attribute and return the selected value (or None)."""
    label = f"{attribute.name}{' *' if attribute.is_required else ''}"
    if attribute.unit:
        label += f" ({attribute.unit})"
    widget_key = f"attr_{attribute.id}"

    if attribute.type == AttributeType.SELECT:
        options = attribute.active_options()
        labels = {o.value: f"{o.display_name} ({o.price_modifier:+,.2f})" if o.price_modifier else o.display_name
                  for o in options}
        choice = st.selectbox(
            label, options=[None] + [o.value for o in options],
            format_func=lambda v: "— Select —" if v is None else labels[v],
            key=widget_key,
        )
        return choice

    if attribute.type == AttributeType.MULTI_SELECT:
        options = attribute.active_options()
        labels = {o.value: o.display_name for o in options}
        return st.multiselect(label, options=[o.value for o in options],
                              format_func=lambda v: labels[v], key=widget_key)

    if attribute.type == AttributeType.NUMBER:
        default = attribute.default_value or attribute.min_value or 0
        return st.number_input(label, value=float(default), key=widget_key)

    if attribute.type == AttributeType.DIMENSION:
        default = float(attribute.default_value or attribute.min_value or 1)
        c1, c2 = st.columns(2)
        width = c1.number_input(f"{attribute.name} width", value=default, key=f"{widget_key}_w")
        height = c2.number_input(f"{attribute.name} height", value=default, key=f"{widget_key}_h")
        return {"width": width, "height": height}

    if attribute.type == AttributeType.BOOLEAN:
        return st.checkbox(label, value=(attribute.default_value or "").lower() == "true", key=widget_key)

    return st.text_input(label, value=attribute.default_value or "", key=widget_key) or None


# ============================================================================
# SIDEBAR: Product Selection
# ============================================================================
with st.sidebar:
    st.header("📦 Product")

    with st.container(border=True):
        search = st.text_input("Search", placeholder="Name, SKU or description")
        category = st.selectbox("Category", ["ALL"] + catalog.categories())
        products = catalog.list_products(
            search=search or None,
            category=None if category == "ALL" else category,
            is_active=True,
        )
        if not products:
            st.warning("No products match")
            st.stop()

        product = st.selectbox(
            "Product",
            options=products,
            format_func=lambda p: f"{p.name} | {p.sku or p.id}",
        )

    st.caption(f"**Pricing:** {product.pricing_type.value}")
    st.caption(f"**Base Price:** ${product.base_price:,.2f} / {product.unit}")
    if product.calculation_formula:
        st.caption(f"**Formula:** `{product.calculation_formula}`")

    st.divider()
    problems = catalog.validate_catalog()
    if problems:
        st.warning(f"⚠️ {len(problems)} catalog problem(s)")
    else:
        st.success(f"✅ {len(catalog.products)} products loaded")


# ============================================================================
# MAIN CONTENT: TABBED INTERFACE
# ============================================================================
st.title("Product Pricing")
st.caption(f"v1.0 | Pricing Engine Active | {datetime.now().strftime('%Y-%m-%d')}")

tab1, tab2, tab3, tab4 = st.tabs(["⚙️ Configure", "📚 Catalog", "📋 Price Sheet", "📊 System"])


# ============================================================================
# TAB 1: CONFIGURATOR
# ============================================================================
with tab1:
    col1, col2 = st.columns([1.6, 1.4], gap="large")

    with col1:
        st.subheader(product.name)
        if product.description:
            st.caption(product.description)

        configuration = {}
        with st.container(border=True):
            for attribute in sorted(product.attributes, key=lambda a: a.sort_order):
                if not attribute.is_configurable:
                    if attribute.default_value is not None:
                        configuration[attribute.key] = attribute.default_value
                    continue
                value = attribute_widget(attribute)
                if value is not None:
                    configuration[attribute.key] = value

            quantity = st.number_input("Quantity", min_value=0.01, value=1.0, step=1.0, key="quantity")

    with col2:
        st.subheader("Price")
        result = catalog.calculate(product.id, configuration, quantity)

        with st.container(border=True):
            m1, m2 = st.columns(2)
            m1.metric("Unit Price", f"${result.unit_price:,.2f}")
            m2.metric("Total", f"${result.total_price:,.2f}")
            m3, m4 = st.columns(2)
            m3.metric("Margin", f"${result.margin:,.2f}")
            m4.metric("Margin %", f"{result.margin_percent}%")
            st.caption(f"Unit cost ${result.unit_cost:,.2f} | Total cost ${result.total_cost:,.2f} | "
                       f"Tax {result.tax_rate}% | Unit: {result.unit}")

            for warning in result.errors:
                st.warning(warning)

        with st.expander("🔍 Calculation Details"):
            for t in result.trace:
                if t.value:
                    st.caption(f"**{t.step}**: {t.description} = `{t.value}`")
                else:
                    st.caption(f"**{t.step}**: {t.description}")
            st.code(json.dumps(result.to_dict(), indent=2), language="json")

        if st.button("➕ Add to Price Sheet", type="primary"):
            st.session_state.setdefault('sheet', []).append({
                'product_id': product.id,
                'configuration': configuration,
                'quantity': quantity,
            })
            st.toast(f"Added {product.name}")


# ============================================================================
# TAB 2: CATALOG EXPLORER
# ============================================================================
with tab2:
    st.subheader("📚 Catalog")
    catalog_df = catalog.to_frame()
    st.dataframe(catalog_df, use_container_width=True, hide_index=True)
    st.caption(f"Total products: {len(catalog_df):,}")

    if problems:
        with st.expander("⚠️ Catalog Problems"):
            for problem in problems:
                st.caption(problem)


# ============================================================================
# TAB 3: PRICE SHEET
# ============================================================================
with tab3:
    st.subheader("📋 Price Sheet")
    sheet = st.session_state.get('sheet', [])

    if sheet:
        sheet_df = build_price_sheet(catalog, sheet)
        st.dataframe(sheet_df, use_container_width=True, hide_index=True)

        m1, m2 = st.columns(2)
        m1.metric("Sheet Total", f"${sheet_df['Total Price'].sum():,.2f}")
        m2.metric("Sheet Margin", f"${sheet_df['Margin'].sum():,.2f}")

        btn_col1, btn_col2 = st.columns(2)
        with btn_col1:
            st.download_button(
                "📥 CSV",
                data=sheet_df.to_csv(index=False),
                file_name=f"price_sheet_{datetime.now().strftime('%Y%m%d')}.csv",
                mime="text/csv",
                use_container_width=True
            )
        with btn_col2:
            if st.button("🗑️ Clear", use_container_width=True):
                st.session_state.sheet = []
                st.rerun()
    else:
        st.info("Price sheet is empty")
        st.caption("Configure a product and add it to the sheet.")


# ============================================================================
# TAB 4: SYSTEM INFO
# ============================================================================
with tab4:
    st.header("System Status")
    st.caption(f"Catalog: `{catalog.catalog_path}` | Rounding: {settings.rounding}")

    build_report_path = settings.build_report
    if build_report_path.exists():
        with open(build_report_path, 'r') as f:
            report = json.load(f)

        metrics = report.get('metrics', {})
        c1, c2, c3, c4 = st.columns(4)
        c1.metric("Products", f"{metrics.get('product_count', 0):,}")
        c2.metric("Variants", f"{metrics.get('variant_count', 0):,}")
        c3.metric("Status", report.get('status', 'unknown'))
        c4.metric("Last Build", report.get('timestamp', '')[:10])

        pricing_types = metrics.get('pricing_types', {})
        if pricing_types:
            st.dataframe(
                pd.DataFrame([{'Pricing Type': k, 'Products': v} for k, v in pricing_types.items()]),
                use_container_width=True, hide_index=True
            )

    if st.button("🔄 Reload Catalog", type="secondary"):
        catalog.reload()
        st.toast("Catalog reloaded")
        st.rerun()

"""ETF overlap local web UI (Streamlit).

Features:

- Dashboard: fund and holding counts, asset counts per fund
- Overlap: assets held by several funds, with a fund-count histogram
- Compare: side-by-side weights for a chosen fund subset
- Bidirectional search:
  - Fund -> assets
  - Asset -> funds

The app reads ``{fund}-etf-holdings.csv`` files from a local directory or a
previously exported portfolio table.
"""

from __future__ import annotations

from pathlib import Path
import sys

import altair as alt
import pandas as pd
import streamlit as st

# Allow running directly from repo root without package installation.
sys.path.insert(0, str(Path(__file__).resolve().parents[1] / "src"))

from config.settings import settings  # noqa: E402
from extract.holdings_reader import import_table, read_holdings_directory  # noqa: E402
from models.enums import SortBy  # noqa: E402
from models.errors import AnalyzerError  # noqa: E402
from services import asset_service, fund_service  # noqa: E402
from services.search_service import HoldingsIndex  # noqa: E402
from transform.calc.asset_aggregator import aggregate_assets  # noqa: E402
from transform.combine.portfolio import Portfolio, filter_funds, load_portfolio, portfolio_from_frame  # noqa: E402

DEFAULT_DATA_DIR = settings.data_dir or str(Path(__file__).resolve().parents[1] / "data" / "samples")


def _inject_css() -> None:
    st.markdown(
        """
        <style>
          .hero {
            background: linear-gradient(135deg, #0f172a 0%, #1e293b 40%, #1e3a8a 100%);
            border-radius: 18px;
            padding: 20px 22px;
            color: #f8fafc;
            margin-bottom: 12px;
          }
          .hero h1 {
            margin: 0;
            font-size: 1.65rem;
          }
          .hero p {
            margin: 0.45rem 0 0 0;
            color: #dbeafe;
          }
        </style>
        """,
        unsafe_allow_html=True,
    )


@st.cache_data(ttl=60, show_spinner=False)
def _load_frame(source: str, is_import: bool) -> pd.DataFrame:
    if is_import:
        return portfolio_from_frame(import_table(source)).frame
    return load_portfolio(read_holdings_directory(source, workers=settings.worker_count), workers=settings.worker_count).frame


def _download(df: pd.DataFrame, label: str, file_name: str) -> None:
    st.download_button(label, data=df.to_csv(index=False).encode("utf-8"), file_name=file_name, mime="text/csv")


def _render_dashboard(portfolio: Portfolio) -> None:
    st.subheader("Dashboard")
    result = fund_service.summary(portfolio)

    c1, c2, c3 = st.columns(3)
    c1.metric("ETFs", len(result.table))
    c2.metric("Holdings", len(portfolio))
    c3.metric("Distinct assets", portfolio.frame["Symbol"].nunique())

    if result.is_empty:
        st.info("No holdings loaded for the current filter.")
        return

    chart = alt.Chart(result.table).mark_bar(color="#2563eb").encode(
        x=alt.X("AssetCount:Q", title="Assets"),
        y=alt.Y("Fund:N", sort="-x", title="ETF"),
        tooltip=["Fund:N", "AssetCount:Q"],
    )
    st.altair_chart(chart, use_container_width=True)
    st.dataframe(result.table, use_container_width=True, hide_index=True)


def _render_overlap(portfolio: Portfolio, sort_by: SortBy) -> None:
    st.subheader("Overlap")
    aggregates = aggregate_assets(portfolio, workers=settings.worker_count)
    result = asset_service.overlap(aggregates, sort_by)
    st.markdown(result.summary)

    histogram = asset_service.fund_count_histogram(aggregates)
    if not histogram.empty:
        chart = alt.Chart(histogram).mark_bar(color="#10b981").encode(
            x=alt.X("FundCount:O", title="Held by N ETFs"),
            y=alt.Y("AssetCount:Q", title="Assets"),
            tooltip=["FundCount:O", "AssetCount:Q"],
        )
        st.altair_chart(chart, use_container_width=True)

    if result.is_empty:
        st.info("No asset is held by more than one ETF.")
        return
    st.dataframe(result.table, use_container_width=True, height=420, hide_index=True)
    _download(result.table, "Download overlap CSV", "overlap.csv")


def _render_compare(portfolio: Portfolio) -> None:
    st.subheader("Compare")
    funds = st.multiselect("ETFs to compare", options=portfolio.funds, default=portfolio.funds[:3])
    if not funds:
        st.info("Select at least one ETF.")
        return

    result = fund_service.compare(aggregate_assets(portfolio, workers=settings.worker_count), funds)
    st.markdown(result.summary)
    st.dataframe(result.table, use_container_width=True, height=420, hide_index=True)
    _download(result.table, "Download comparison CSV", "compare.csv")


def _render_fund_search(portfolio: Portfolio, index: HoldingsIndex) -> None:
    st.subheader("Fund -> Assets")
    funds = index.funds()
    if not funds:
        st.info("No funds loaded.")
        return

    selected = st.selectbox("Select ETF", options=funds, index=0)
    holdings = portfolio.frame[portfolio.frame["Fund"] == selected].sort_values(by=["Weight"], ascending=False)
    st.markdown(f"fund=`{selected}` | assets=`{len(index.assets_of(selected))}`")

    top_n = min(20, len(holdings))
    chart_df = holdings.head(top_n).copy()
    chart_df["label"] = chart_df["Symbol"].astype(str) + " | " + chart_df["Name"].astype(str)
    chart = alt.Chart(chart_df).mark_bar(color="#f59e0b").encode(
        x=alt.X("Weight:Q", title="Weight (%)"),
        y=alt.Y("label:N", sort="-x", title="Top Assets"),
        tooltip=["Symbol:N", "Name:N", "Weight:Q", "Shares:Q"],
    )
    st.altair_chart(chart, use_container_width=True)
    st.dataframe(holdings, use_container_width=True, height=420, hide_index=True)

    others = [fund for fund in funds if fund != selected]
    if others:
        shared = pd.DataFrame(
            [{"Fund": other, "SharedAssets": len(index.shared_assets(selected, other))} for other in others]
        ).sort_values(by=["SharedAssets", "Fund"], ascending=[False, True])
        st.markdown("Assets shared with other ETFs")
        st.dataframe(shared, use_container_width=True, hide_index=True)


def _render_asset_search(portfolio: Portfolio, index: HoldingsIndex) -> None:
    st.subheader("Asset -> Funds")
    keyword = st.text_input("Search asset", placeholder="ticker, asset name, ...")

    catalog = portfolio.frame.drop_duplicates(subset=["Symbol"])[["Symbol", "Name"]]
    if keyword.strip():
        s = keyword.strip().lower()
        catalog = catalog[
            catalog["Symbol"].str.lower().str.contains(s, regex=False)
            | catalog["Name"].str.lower().str.contains(s, regex=False)
        ].head(300)

    options = sorted(catalog["Symbol"].tolist())
    if not options:
        st.info("No matching assets.")
        return

    names = catalog.set_index("Symbol")["Name"].to_dict()
    selected = st.selectbox("Select asset", options=options, format_func=lambda x: f"{x} | {names.get(x, '')}")
    holders = sorted(index.funds_holding(selected))
    rows = portfolio.frame[(portfolio.frame["Symbol"] == selected) & (portfolio.frame["Fund"].isin(holders))]
    st.markdown(f"symbol=`{selected}` | held by `{len(holders)}` ETFs")
    st.dataframe(rows[["Fund", "Weight", "Shares", "RowNumber"]], use_container_width=True, hide_index=True)


def main() -> None:
    st.set_page_config(page_title="ETF Overlap Explorer", layout="wide")
    _inject_css()

    st.markdown(
        """
        <div class="hero">
          <h1>ETF Overlap Explorer</h1>
          <p>Which assets are unique to one ETF, which overlap, and how their weights compare.</p>
        </div>
        """,
        unsafe_allow_html=True,
    )

    with st.sidebar:
        st.subheader("Navigation")
        page = st.radio(
            "Page",
            options=["Dashboard", "Overlap", "Compare", "Fund -> Assets", "Asset -> Funds"],
            index=0,
        )

        st.divider()
        st.subheader("Source")
        is_import = st.toggle("Use exported portfolio file", value=False)
        source = st.text_input(
            "Exported file" if is_import else "Holdings directory",
            value="" if is_import else DEFAULT_DATA_DIR,
        )

        if st.button("Reload (clear cache)", use_container_width=True):
            st.cache_data.clear()
            st.rerun()

    if not source.strip():
        st.info("Enter a holdings directory or an exported portfolio file.")
        st.stop()

    try:
        portfolio = Portfolio(frame=_load_frame(source.strip(), is_import))
    except AnalyzerError as exc:
        st.error(f"Failed to load holdings: {exc}")
        st.stop()

    with st.sidebar:
        st.divider()
        st.subheader("Filters")
        selected_funds = st.multiselect("ETFs", options=portfolio.funds, default=[])
        sort_by = SortBy.parse(st.radio("Sort by", options=["symbol", "count"], index=0, horizontal=True))

    portfolio = filter_funds(portfolio, selected_funds)
    index = HoldingsIndex.from_portfolio(portfolio)

    if page == "Dashboard":
        _render_dashboard(portfolio)
    elif page == "Overlap":
        _render_overlap(portfolio, sort_by)
    elif page == "Compare":
        _render_compare(portfolio)
    elif page == "Fund -> Assets":
        _render_fund_search(portfolio, index)
    elif page == "Asset -> Funds":
        _render_asset_search(portfolio, index)


if __name__ == "__main__":
    main()

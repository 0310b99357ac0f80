# streamlit_app.py — Predictive Selling dashboard: London borough score + RandomForest models + Leaflet maps
import numpy as np
import pandas as pd
import plotly.express as px
import streamlit as st
from streamlit_folium import st_folium

import config
from charts import feature_importance_figure, score_bar_figure
from maps import make_borough_marker_map, make_pydeck_deck, make_score_bubble_map, map_to_html
from modeling import InsufficientDataError, fit_conversion_classifier, fit_order_value_regressor
from selling_score import DegenerateInputError, ScoringInputError, add_score_bands, compute_selling_score, rank_entities
from synthetic_data import generate_borough_features, generate_sessions

# -------------------- Page setup --------------------
st.set_page_config(page_title="Predictive Selling – London", page_icon="📈", layout="wide")
st.markdown(
    """
    <style>
      .block-container {padding-top: 1.1rem; padding-bottom: 1.1rem;}
    </style>
    """,
    unsafe_allow_html=True,
)
st.title("Predictive Selling Score – London Boroughs")
st.caption("Synthetic data · RandomForest models · Leaflet maps")

# -------------------- Sidebar --------------------
st.sidebar.markdown("### ⚙️ Simulation")
seed = st.sidebar.number_input("Random seed", min_value=0, value=config.SEED, step=1)
n_sessions = st.sidebar.slider("Simulated sessions", 200, 10000, config.N_SESSIONS, 100)
n_estimators = st.sidebar.slider("Trees per forest", 50, 500, config.N_ESTIMATORS, 50)

# -------------------- Data --------------------
@st.cache_data(show_spinner=True)
def load_boroughs(seed: int) -> pd.DataFrame:
    return generate_borough_features(seed=seed)

@st.cache_data(show_spinner=True)
def load_sessions(n: int, seed: int) -> pd.DataFrame:
    return generate_sessions(n_samples=n, seed=seed)

@st.cache_resource(show_spinner="Fitting models...")
def load_models(n: int, seed: int, trees: int):
    sessions = load_sessions(n, seed)
    clf = fit_conversion_classifier(sessions, n_estimators=trees, random_state=seed, test_size=config.TEST_SIZE)
    reg = fit_order_value_regressor(sessions, n_estimators=trees, random_state=seed, test_size=config.TEST_SIZE)
    return clf, reg

tab_score, tab_ml = st.tabs(["📍 Selling Score", "🤖 ML"])

# =====================================================
# ================ TAB 1 – SELLING SCORE ==============
# =====================================================
with tab_score:
    boroughs = load_boroughs(int(seed))
    try:
        scored = rank_entities(add_score_bands(compute_selling_score(boroughs)))
    except DegenerateInputError as e:
        st.error(f"Degenerate input: {e}")
        st.stop()
    except ScoringInputError as e:
        st.error(f"Cannot score boroughs: {e}")
        st.stop()

    st.info(
        "**How the score works**  \n"
        "40% engagement + 30% dwell time + 20% personalization + 10% conversion rate.  \n"
        "Engagement, dwell time and conversion are divided by the best borough's value, "
        "so every score is relative to this set of boroughs."
    )

    # ---------- KPIs ----------
    k1, k2, k3, k4 = st.columns(4)
    k1.metric("Boroughs", f"{len(scored):,}")
    k2.metric("Median score", f"{scored['composite_score'].median():.0f}")
    k3.metric("Top borough", str(scored.iloc[0]["borough"]))
    k4.metric("High band", f"{(scored['score_band'] == 'High').sum()}")

    bands = sorted(scored["score_band"].unique().tolist())
    sel_bands = st.multiselect("Score band", bands, default=bands)
    flt = scored[scored["score_band"].isin(sel_bands)] if sel_bands else scored

    # ---------- MAP (pydeck, above charts) ----------
    st.markdown("### Map")
    deck = make_pydeck_deck(flt)
    if deck is None:
        st.info("No geocoded boroughs to plot. Check the band filter.")
    else:
        legend_html = " ".join(
            f"<span style='display:inline-flex;align-items:center;margin-right:12px'>"
            f"<span style='width:12px;height:12px;border-radius:3px;background:{c};"
            f"display:inline-block;margin-right:6px'></span>{b}</span>"
            for b, c in config.BAND_COLORS.items()
        )
        st.markdown(f"**Legend:** {legend_html}", unsafe_allow_html=True)
        st.pydeck_chart(deck, use_container_width=True)

    st.plotly_chart(score_bar_figure(flt), use_container_width=True)

    # ---------- Leaflet maps ----------
    with st.expander("🌍 Leaflet maps (downloadable HTML)", expanded=True):
        mc1, mc2 = st.columns(2)
        with mc1:
            m1 = make_borough_marker_map(flt)
            if m1 is None:
                st.info("No geocoded boroughs to plot.")
            else:
                st_folium(m1, height=520, width=None, key="marker_map")
                st.download_button("⬇️ Download borough marker map", map_to_html(m1),
                                   "borough_marker_map.html", "text/html")
        with mc2:
            m2 = make_score_bubble_map(flt)
            if m2 is None:
                st.info("No geocoded boroughs to plot.")
            else:
                st_folium(m2, height=520, width=None, key="bubble_map")
                st.download_button("⬇️ Download score bubble map", map_to_html(m2),
                                   "borough_score_map.html", "text/html")

    # ---------- Feature mix ----------
    left, right = st.columns(2)
    with left:
        fig_sc = px.scatter(flt, x="engagement", y="dwell_time", size="composite_score",
                            color="score_band", hover_name="borough",
                            color_discrete_map=config.BAND_COLORS, title="Engagement vs dwell time")
        st.plotly_chart(fig_sc, use_container_width=True)
    with right:
        fig_h = px.histogram(scored, x="composite_score", nbins=20, title="Score distribution")
        fig_h.update_xaxes(range=[0, 100])
        st.plotly_chart(fig_h, use_container_width=True)

    st.markdown("### Ranked boroughs")
    show_cols = ["rank", "borough", "composite_score", "score_band", "engagement", "dwell_time",
                 "personalization_score", "conversion_rate"]
    st.dataframe(flt[show_cols], use_container_width=True, hide_index=True)
    st.download_button("⬇️ Download scores CSV", data=scored.to_csv(index=False),
                       file_name="borough_scores.csv", mime="text/csv")

# =====================================================
# ==================== TAB 2 – ML =====================
# =====================================================
with tab_ml:
    st.info(
        "**How to read this tab**  \n"
        "1) A **RandomForestClassifier** predicts whether a session converts.  \n"
        "2) A **RandomForestRegressor** predicts order value for converted sessions.  \n"
        "3) Feature importances show which behaviours the forests rely on."
    )
    sessions = load_sessions(int(n_sessions), int(seed))
    try:
        clf, reg = load_models(int(n_sessions), int(seed), int(n_estimators))
    except InsufficientDataError as e:
        st.warning(f"Not enough data to fit the models: {e}")
        st.stop()

    st.markdown("### ML KPIs")
    c1, c2, c3, c4 = st.columns(4)
    c1.metric("Sessions", f"{len(sessions):,}")
    c2.metric("Conversion rate", f"{100 * sessions['converted'].mean():.1f}%")
    c3.metric("Classifier accuracy", f"{clf.metrics['accuracy']:.3f}")
    c4.metric("Regressor R²", f"{reg.metrics['r2']:.3f}")

    left, right = st.columns(2)
    with left:
        fig_cm = px.imshow(
            clf.confusion,
            x=["Pred no-convert", "Pred convert"],
            y=["True no-convert", "True convert"],
            text_auto=True, color_continuous_scale="Blues",
            title="Confusion Matrix (counts)",
        )
        st.plotly_chart(fig_cm, use_container_width=True)
        st.write("**Classification Report**")
        st.text(clf.report_text)
    with right:
        st.plotly_chart(feature_importance_figure(clf.importances, "Conversion – Feature Importances"),
                        use_container_width=True)

    left, right = st.columns(2)
    with left:
        st.plotly_chart(feature_importance_figure(reg.importances, "Order value – Feature Importances"),
                        use_container_width=True)
    with right:
        st.metric("Regressor MAE", f"£{reg.metrics['mae']:,.2f}")
        conv = sessions[sessions["converted"] == 1]
        fig_ov = px.histogram(conv, x="order_value", nbins=50, title="Order value (converted sessions)")
        st.plotly_chart(fig_ov, use_container_width=True)

    by_device = (sessions.groupby("device")
                         .agg(sessions=("converted", "size"), conversion=("converted", "mean"),
                              avg_order=("order_value", lambda s: s[s > 0].mean() if (s > 0).any() else np.nan))
                         .reset_index())
    st.dataframe(by_device, use_container_width=True, hide_index=True)

st.caption("Scores are relative to the simulated borough set. Leaflet maps are downloadable as HTML.")

# charts.py — feature-importance and score charts (plotly for the app, seaborn for static PNGs)
from pathlib import Path

import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt
import pandas as pd
import plotly.express as px
import seaborn as sns

from config import BAND_COLORS


def feature_importance_figure(importances: pd.DataFrame, title: str = "Feature Importances", top_n: int = 10):
    top = importances.head(top_n).iloc[::-1]
    fig = px.bar(top, x="importance", y="feature", orientation="h", title=title,
                 labels={"feature": "feature", "importance": "importance"})
    fig.update_layout(height=max(280, 40 * len(top)), margin=dict(l=10, r=10, t=40, b=10))
    return fig


def save_feature_importance_png(importances: pd.DataFrame, path, title: str = "Feature Importances",
                                top_n: int = 10) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    top = importances.head(top_n)
    fig, ax = plt.subplots(figsize=(8, max(3, 0.45 * len(top))))
    try:
        sns.barplot(data=top, x="importance", y="feature", color="#1f4e79", ax=ax)
        ax.set_title(title)
        ax.set_xlabel("importance")
        ax.set_ylabel("")
        fig.tight_layout()
        fig.savefig(path, dpi=120)
    finally:
        plt.close(fig)
    return path


def score_bar_figure(scored: pd.DataFrame, id_col: str = "borough"):
    """Boroughs by composite score, coloured by band."""
    plot_df = scored.sort_values("composite_score", ascending=False)
    color = "score_band" if "score_band" in plot_df.columns else None
    fig = px.bar(plot_df, x=id_col, y="composite_score", color=color,
                 color_discrete_map=BAND_COLORS, title="Predictive Selling Score by Borough")
    fig.update_layout(yaxis_range=[0, 100], margin=dict(l=10, r=10, t=40, b=10))
    fig.update_xaxes(title="", tickangle=-45)
    return fig

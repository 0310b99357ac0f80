# run_analysis.py — batch run: simulate data -> score / fit models -> write maps, plots, tables
import argparse
import logging
import sys
from pathlib import Path

import config
from charts import feature_importance_figure, save_feature_importance_png
from maps import make_borough_marker_map, make_score_bubble_map
from modeling import MIN_ROWS, InsufficientDataError, fit_conversion_classifier, fit_order_value_regressor
from selling_score import ScoringInputError, add_score_bands, compute_selling_score, rank_entities
from synthetic_data import generate_borough_features, generate_sessions

logger = logging.getLogger("run_analysis")


def parse_args(argv=None):
    p = argparse.ArgumentParser(description="Predictive selling analytics over synthetic London data")
    p.add_argument("--seed", type=int, default=config.SEED)
    p.add_argument("--sessions", type=int, default=config.N_SESSIONS, help="number of simulated sessions")
    p.add_argument("--estimators", type=int, default=config.N_ESTIMATORS)
    p.add_argument("--test-size", type=float, default=config.TEST_SIZE, help="held-out fraction for the models")
    p.add_argument("--output-dir", type=Path, default=config.OUTPUT_DIR)
    p.add_argument("--skip-models", action="store_true", help="only compute the borough selling score")
    args = p.parse_args(argv)
    if args.sessions < MIN_ROWS:
        p.error(f"--sessions must be at least {MIN_ROWS}")
    if args.estimators < 1:
        p.error("--estimators must be at least 1")
    if not 0 < args.test_size < 1:
        p.error("--test-size must lie strictly between 0 and 1")
    return args


def run_selling_score(seed: int, out_dir: Path):
    boroughs = generate_borough_features(seed=seed)
    scored = rank_entities(add_score_bands(compute_selling_score(boroughs)))
    scored.to_csv(out_dir / "borough_scores.csv", index=False)

    marker_map = make_borough_marker_map(scored)
    if marker_map is not None:
        marker_map.save(str(out_dir / "borough_marker_map.html"))
    bubble_map = make_score_bubble_map(scored)
    if bubble_map is not None:
        bubble_map.save(str(out_dir / "borough_score_map.html"))

    top = scored.iloc[0]
    logger.info("scored %d boroughs; top: %s (%.0f)", len(scored), top["borough"], top["composite_score"])
    return scored


def run_models(seed: int, n_sessions: int, n_estimators: int, out_dir: Path, test_size: float = config.TEST_SIZE):
    sessions = generate_sessions(n_samples=n_sessions, seed=seed)
    reports = {
        "conversion": fit_conversion_classifier(sessions, n_estimators=n_estimators,
                                                random_state=seed, test_size=test_size),
        "order_value": fit_order_value_regressor(sessions, n_estimators=n_estimators,
                                                 random_state=seed, test_size=test_size),
    }
    for name, rep in reports.items():
        title = f"{name.replace('_', ' ').title()} - Feature Importances"
        save_feature_importance_png(rep.importances, out_dir / f"{name}_importance.png", title=title)
        feature_importance_figure(rep.importances, title=title).write_html(str(out_dir / f"{name}_importance.html"))
        rep.importances.to_csv(out_dir / f"{name}_importance.csv", index=False)
    return reports


def main(argv=None) -> int:
    args = parse_args(argv)
    logging.basicConfig(level=config.LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    out_dir = Path(args.output_dir)
    out_dir.mkdir(parents=True, exist_ok=True)

    try:
        run_selling_score(args.seed, out_dir)
        if not args.skip_models:
            reports = run_models(args.seed, args.sessions, args.estimators, out_dir, test_size=args.test_size)
            for name, rep in reports.items():
                metrics = ", ".join(f"{k}={v:.3f}" for k, v in rep.metrics.items())
                logger.info("%s: %s; top feature %s", name, metrics, rep.importances.iloc[0]["feature"])
    except (ScoringInputError, InsufficientDataError) as e:
        logger.error("analysis failed: %s", e)
        return 1

    logger.info("outputs written to %s", out_dir.resolve())
    return 0


if __name__ == "__main__":
    sys.exit(main())

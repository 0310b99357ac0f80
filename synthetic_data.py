# synthetic_data.py — seeded sample tables for the London selling analyses
import numpy as np
import pandas as pd

# 32 boroughs + the City of London, approximate centroids
LONDON_BOROUGHS = {
    "Barking and Dagenham": (51.5465, 0.1293),
    "Barnet": (51.6252, -0.1517),
    "Bexley": (51.4549, 0.1505),
    "Brent": (51.5588, -0.2817),
    "Bromley": (51.4039, 0.0198),
    "Camden": (51.5290, -0.1255),
    "City of London": (51.5155, -0.0922),
    "Croydon": (51.3714, -0.0977),
    "Ealing": (51.5130, -0.3089),
    "Enfield": (51.6538, -0.0799),
    "Greenwich": (51.4892, 0.0648),
    "Hackney": (51.5450, -0.0553),
    "Hammersmith and Fulham": (51.4927, -0.2339),
    "Haringey": (51.5906, -0.1110),
    "Harrow": (51.5898, -0.3346),
    "Havering": (51.5812, 0.1837),
    "Hillingdon": (51.5441, -0.4760),
    "Hounslow": (51.4746, -0.3680),
    "Islington": (51.5416, -0.1022),
    "Kensington and Chelsea": (51.5020, -0.1947),
    "Kingston upon Thames": (51.4085, -0.3064),
    "Lambeth": (51.4571, -0.1231),
    "Lewisham": (51.4452, -0.0209),
    "Merton": (51.4098, -0.2108),
    "Newham": (51.5255, 0.0352),
    "Redbridge": (51.5590, 0.0741),
    "Richmond upon Thames": (51.4479, -0.3260),
    "Southwark": (51.5035, -0.0804),
    "Sutton": (51.3618, -0.1945),
    "Tower Hamlets": (51.5099, -0.0059),
    "Waltham Forest": (51.5908, -0.0134),
    "Wandsworth": (51.4567, -0.1910),
    "Westminster": (51.4975, -0.1357),
}

DEVICES = ["desktop", "mobile", "tablet"]


def generate_borough_features(seed: int = 42) -> pd.DataFrame:
    """One row per borough with the four raw selling features."""
    rng = np.random.default_rng(seed)
    names = list(LONDON_BOROUGHS)
    n = len(names)
    return pd.DataFrame({
        "borough": names,
        "lat": [LONDON_BOROUGHS[b][0] for b in names],
        "lon": [LONDON_BOROUGHS[b][1] for b in names],
        "engagement": rng.uniform(100, 1000, n).round(0),
        "dwell_time": rng.uniform(30, 600, n).round(1),
        "personalization_score": rng.uniform(0, 1, n).round(3),
        "conversion_rate": rng.uniform(0.01, 0.20, n).round(4),
    })


def generate_sessions(n_samples: int = 2000, seed: int = 42) -> pd.DataFrame:
    """Visitor sessions with a conversion flag and order value that depend on behaviour."""
    if n_samples < 1:
        raise ValueError("n_samples must be at least 1")
    rng = np.random.default_rng(seed)

    boroughs = rng.choice(list(LONDON_BOROUGHS), n_samples)
    device = rng.choice(DEVICES, n_samples, p=[0.45, 0.45, 0.10])
    engagement = rng.gamma(shape=2.0, scale=50.0, size=n_samples).round(1)
    dwell_time = rng.lognormal(mean=4.5, sigma=0.6, size=n_samples).round(1)
    pages_viewed = rng.poisson(lam=4, size=n_samples) + 1
    personalization = rng.beta(2, 2, n_samples).round(3)
    returning = rng.binomial(1, 0.35, n_samples)

    # logistic link so the classifier has something to learn
    logit = (
        -4.0
        + 0.012 * engagement
        + 0.006 * dwell_time
        + 0.15 * pages_viewed
        + 1.8 * personalization
        + 0.8 * returning
        - 0.4 * (device == "mobile")
    )
    p_convert = 1.0 / (1.0 + np.exp(-logit))
    converted = rng.binomial(1, p_convert)

    basket = rng.lognormal(mean=3.5, sigma=0.5, size=n_samples)
    order_value = np.where(
        converted == 1,
        basket * (1 + 0.05 * pages_viewed + 0.6 * personalization + 0.002 * dwell_time),
        0.0,
    ).round(2)

    return pd.DataFrame({
        "borough": boroughs,
        "device": device,
        "engagement": engagement,
        "dwell_time": dwell_time,
        "pages_viewed": pages_viewed,
        "personalization_score": personalization,
        "returning_visitor": returning,
        "converted": converted,
        "order_value": order_value,
    })

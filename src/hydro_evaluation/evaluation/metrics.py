from dataclasses import dataclass

import numpy as np

KGE_METHODS = ("2009", "2012")


@dataclass(frozen=True)
class KGEComponents:
    """Kling-Gupta efficiency together with its decomposition terms.

    Attributes:
        kge: Efficiency value.
        r: Pearson correlation between simulated and observed values.
        beta: Bias ratio, mean(sim) / mean(obs).
        variability: Variability ratio. Ratio of standard deviations for the
            2009 parameterization (alpha), ratio of coefficients of variation
            for the 2012 parameterization (gamma).
        method: Parameterization the terms belong to, "2009" or "2012".
    """

    kge: float
    r: float
    beta: float
    variability: float
    method: str

    def term(self, name: str) -> float:
        """Return a decomposition term by name ("kge", "r", "beta" or "variability")."""
        if name not in ("kge", "r", "beta", "variability"):
            raise KeyError(f"Unknown KGE term '{name}'")
        return getattr(self, name)


def drop_missing_pairs(sim: np.ndarray, obs: np.ndarray) -> tuple[np.ndarray, np.ndarray]:
    """
    Remove every timestep where either the simulated or the observed value is missing.

    Args:
        sim: Simulated values array.
        obs: Observed values array.

    Returns:
        Tuple of (sim, obs) float arrays restricted to pairwise-complete timesteps.

    Raises:
        ValueError: If the two arrays differ in length.
    """
    sim = np.asarray(sim, dtype=float)
    obs = np.asarray(obs, dtype=float)
    if sim.shape != obs.shape:
        raise ValueError(f"Shape mismatch: simulated {sim.shape} vs observed {obs.shape}")
    valid = np.isfinite(sim) & np.isfinite(obs)
    return sim[valid], obs[valid]


def _is_constant(values: np.ndarray) -> bool:
    return values.size == 0 or np.ptp(values) == 0


def _ratio(numerator: float, denominator: float) -> float:
    if denominator == 0 or not np.isfinite(denominator) or not np.isfinite(numerator):
        return np.nan
    return float(numerator / denominator)


def calculate_pearson_r(sim: np.ndarray, obs: np.ndarray) -> float:
    """
    Calculate Pearson correlation coefficient between simulations and observations.

    Args:
        sim: Simulated values array.
        obs: Observed values array.

    Returns:
        Pearson correlation coefficient. Range: [-1, 1], or NaN when fewer than two
        valid pairs remain or either series has zero variance.
    """
    sim, obs = drop_missing_pairs(sim, obs)
    if len(sim) < 2:
        return np.nan
    if _is_constant(obs) or _is_constant(sim):
        return np.nan
    return float(np.clip(np.corrcoef(sim, obs)[0, 1], -1.0, 1.0))


def calculate_r2(sim: np.ndarray, obs: np.ndarray) -> float:
    """Squared Pearson correlation coefficient over pairwise-complete timesteps."""
    r = calculate_pearson_r(sim, obs)
    if np.isnan(r):
        return np.nan
    return r**2


def calculate_kge(sim: np.ndarray, obs: np.ndarray, method: str = "2009") -> KGEComponents:
    """
    Calculate Kling-Gupta Efficiency and its decomposition.

    KGE = 1 - sqrt((r - 1)^2 + (beta - 1)^2 + (v - 1)^2), where v is the
    ratio of standard deviations (method "2009", Gupta et al.) or the ratio of
    coefficients of variation (method "2012", Kling et al.). Standard deviations
    use one delta degree of freedom.

    Args:
        sim: Simulated values array.
        obs: Observed values array.
        method: Parameterization, "2009" (original) or "2012" (modified).

    Returns:
        KGEComponents with the efficiency and its terms. Undefined terms are NaN,
        and the efficiency itself is NaN whenever any term is undefined.

    Raises:
        ValueError: If the method is unknown.
    """
    if method not in KGE_METHODS:
        raise ValueError(f"Unknown KGE method '{method}'. Must be one of: {', '.join(KGE_METHODS)}")

    sim, obs = drop_missing_pairs(sim, obs)
    if len(sim) < 2:
        return KGEComponents(np.nan, np.nan, np.nan, np.nan, method)

    r = calculate_pearson_r(sim, obs)

    mean_sim = float(np.mean(sim))
    mean_obs = float(np.mean(obs))
    std_sim = float(np.std(sim, ddof=1))
    std_obs = float(np.std(obs, ddof=1))

    beta = _ratio(mean_sim, mean_obs)
    if method == "2009":
        variability = _ratio(std_sim, std_obs)
    else:
        variability = _ratio(_ratio(std_sim, mean_sim), _ratio(std_obs, mean_obs))

    terms = np.array([r, beta, variability])
    if np.any(np.isnan(terms)):
        kge = np.nan
    else:
        kge = float(1 - np.sqrt(np.sum((terms - 1) ** 2)))

    return KGEComponents(kge=kge, r=r, beta=beta, variability=variability, method=method)


def calculate_nse(sim: np.ndarray, obs: np.ndarray) -> float:
    """
    Calculate Nash-Sutcliffe Efficiency coefficient.

    The NSE is a normalized statistic that determines the relative magnitude
    of the residual variance compared to the measured data variance.

    Args:
        sim: Simulated values array.
        obs: Observed values array.

    Returns:
        Nash-Sutcliffe efficiency value. Range: (-inf, 1], where 1 is perfect fit.
        Returns NaN if no valid pairs remain or the observations have zero variance.
    """
    sim, obs = drop_missing_pairs(sim, obs)
    if len(obs) == 0 or _is_constant(obs):
        return np.nan
    numerator = np.sum((sim - obs) ** 2)
    denominator = np.sum((obs - np.mean(obs)) ** 2)
    if denominator == 0:
        return np.nan
    return float(1 - numerator / denominator)


def calculate_linear_regression(sim: np.ndarray, obs: np.ndarray) -> tuple[float, float]:
    """
    Fit an ordinary least squares line of simulated values on observed values.

    Args:
        sim: Simulated values array (response).
        obs: Observed values array (regressor).

    Returns:
        Tuple of (intercept, slope). When the observations have zero variance the
        regressor is dropped from the fit: the slope is NaN and the intercept is the
        mean of the simulated values. Both are NaN when no valid pairs remain.
    """
    sim, obs = drop_missing_pairs(sim, obs)
    if len(sim) == 0:
        return np.nan, np.nan
    mean_sim = float(np.mean(sim))
    if len(sim) < 2 or _is_constant(obs):
        return mean_sim, np.nan
    mean_obs = float(np.mean(obs))
    slope = float(np.sum((obs - mean_obs) * (sim - mean_sim)) / np.sum((obs - mean_obs) ** 2))
    intercept = mean_sim - slope * mean_obs
    return intercept, slope


def calculate_mean_bias(sim: np.ndarray, obs: np.ndarray) -> float:
    """
    Calculate the mean error, mean(sim - obs).

    Args:
        sim: Simulated values array.
        obs: Observed values array.

    Returns:
        Mean bias in discharge units, or NaN if no valid pairs remain.
    """
    sim, obs = drop_missing_pairs(sim, obs)
    if len(sim) == 0:
        return np.nan
    return float(np.mean(sim - obs))


def calculate_pbias(sim: np.ndarray, obs: np.ndarray) -> float:
    """
    Calculate Percent Bias between simulations and observations.

    PBIAS = 100 * sum(sim - obs) / sum(obs). Positive values indicate that the
    model overestimates discharge, negative values that it underestimates it.

    Args:
        sim: Simulated values array.
        obs: Observed values array.

    Returns:
        Percent bias value, 0 for an unbiased model.
        Returns NaN if no valid pairs remain or the sum of observations is zero.
    """
    sim, obs = drop_missing_pairs(sim, obs)
    if len(obs) == 0:
        return np.nan
    sum_obs = np.sum(obs)
    if sum_obs == 0:
        return np.nan
    return float(100 * np.sum(sim - obs) / sum_obs)

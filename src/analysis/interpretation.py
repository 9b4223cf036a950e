from config.settings import SIGNIFICANCE_LEVEL


def interpret_correlation_strength(abs_r: float) -> str:
    if abs_r < 0.1:
        return "negligible"
    elif abs_r < 0.3:
        return "weak"
    elif abs_r < 0.5:
        return "moderate"
    elif abs_r < 0.7:
        return "strong"
    else:
        return "very strong"


def interpret_r_squared(r_squared: float) -> str:
    if r_squared < 0.1:
        return "poor"
    elif r_squared < 0.3:
        return "weak"
    elif r_squared < 0.5:
        return "moderate"
    elif r_squared < 0.7:
        return "good"
    else:
        return "excellent"


def interpret_auc(auc: float) -> str:
    if auc < 0.6:
        return "no better than chance"
    elif auc < 0.7:
        return "poor"
    elif auc < 0.8:
        return "fair"
    elif auc < 0.9:
        return "good"
    else:
        return "excellent"


def is_significant(p_value: float, alpha: float = None) -> bool:
    alpha = alpha or SIGNIFICANCE_LEVEL
    return bool(p_value < alpha)


def significance_phrase(p_value: float, alpha: float = None) -> str:
    if is_significant(p_value, alpha):
        return "statistically significant"
    return "not statistically significant"


def insufficient_data(message: str) -> dict:
    return {'status': 'insufficient_data', 'message': message}


def analysis_error(error: Exception) -> dict:
    return {'status': 'error', 'message': str(error)}

# =============================================================================
# display_utils.py
# =============================================================================
# Utilities for rendering benchmark parameters in logs, results and figures.
#
# Level vectors are written as '[0, 1, 2]' everywhere: in progress lines, in
# the transformation column of the results table, and in error reports.
# =============================================================================

from typing import Optional, Sequence, Union

from .benchmark_setup import BenchmarkDataset, PrivacyModel

# Display names for figure legends
MODEL_NAMES = {
    PrivacyModel.K_ANONYMITY.value: "k-Anonymity",
    PrivacyModel.T_CLOSENESS.value: "t-Closeness",
    PrivacyModel.ENHANCED_B_LIKENESS.value: "Enhanced b-Likeness",
    PrivacyModel.DISTINCT_L_DIVERSITY.value: "Distinct l-Diversity",
}


def format_transformation(levels: Sequence[int]) -> str:
    """Render a level vector as '[0, 1, 2]'."""
    return f"[{', '.join(str(int(level)) for level in levels)}]"


def parse_transformation(text: str) -> tuple:
    """Inverse of format_transformation()."""
    body = text.strip()
    if not (body.startswith("[") and body.endswith("]")):
        raise ValueError(f"Not a level vector: {text!r}")
    body = body[1:-1].strip()
    if not body:
        return ()
    return tuple(int(part) for part in body.split(","))


def format_run_label(
    dataset: BenchmarkDataset,
    attribute: str,
    model: PrivacyModel,
    threshold: float,
    transformation: Optional[Union[str, Sequence[int]]] = None
) -> str:
    """
    Label identifying a run, e.g. 'Census/Marital status/K_ANONYMITY/5.0'.

    If a transformation is given it is appended as a level vector.
    """
    label = f"{dataset}/{attribute}/{model}/{float(threshold)}"
    if transformation is None:
        return label
    if not isinstance(transformation, str):
        transformation = format_transformation(transformation)
    return f"{label}/{transformation}"


def model_display_name(model: str) -> str:
    """Map a model column value to its legend name."""
    return MODEL_NAMES.get(model, model)

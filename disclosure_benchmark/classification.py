"""
Classification accuracy of transformed data.

Trains a logistic regression on the quasi-identifiers of a transformed
dataset to predict the sensitive attribute and reports cross-validated
accuracy. All attributes are treated as categorical: generalized values
such as '20-29' or '*' are labels, not numbers.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional

import numpy as np
import pandas as pd
from sklearn.linear_model import LogisticRegression
from sklearn.model_selection import KFold, cross_val_score
from sklearn.pipeline import Pipeline
from sklearn.preprocessing import OneHotEncoder

from .exceptions import MeasurementError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ClassificationConfiguration:
    """
    Classifier settings.

    Attributes:
        num_folds: Folds of the cross-validation
        max_records: Records sampled before training (None = all records)
        max_iterations: Solver iterations of the logistic regression
    """
    num_folds: int = 3
    max_records: Optional[int] = None
    max_iterations: int = 1000

    @classmethod
    def create_logistic_regression(cls) -> "ClassificationConfiguration":
        return cls()

    def with_num_folds(self, num_folds: int) -> "ClassificationConfiguration":
        return ClassificationConfiguration(num_folds, self.max_records, self.max_iterations)

    def with_max_records(self, max_records: Optional[int]) -> "ClassificationConfiguration":
        return ClassificationConfiguration(self.num_folds, max_records, self.max_iterations)


class LogisticRegressionClassifier:
    """
    Cross-validated logistic regression on categorical features.

    Example:
        >>> classifier = LogisticRegressionClassifier(random_state=42)
        >>> accuracy = classifier.accuracy(frame, ['Sex', 'Age'], 'Education',
        ...                                ClassificationConfiguration())
    """

    def __init__(self, random_state: int = 42):
        self.random_state = random_state

    def _build_pipeline(self, config: ClassificationConfiguration) -> Pipeline:
        return Pipeline([
            ("encode", OneHotEncoder(handle_unknown="ignore")),
            ("clf", LogisticRegression(max_iter=config.max_iterations)),
        ])

    def accuracy(
        self,
        frame: pd.DataFrame,
        features: List[str],
        target: str,
        config: ClassificationConfiguration
    ) -> float:
        """
        Mean cross-validated accuracy of predicting target from features.

        Args:
            frame: Records to classify
            features: Predictor attributes
            target: Response attribute
            config: Classifier settings

        Returns:
            Accuracy in [0, 1]

        Raises:
            MeasurementError: too few records or training failure
        """
        if config.max_records is not None and len(frame) > config.max_records:
            frame = frame.sample(n=config.max_records, random_state=self.random_state)

        if len(frame) < config.num_folds:
            raise MeasurementError(
                f"{len(frame)} records are not enough for {config.num_folds}-fold cross-validation"
            )

        X = frame[features].astype(str)
        y = frame[target].astype(str)

        # A constant response is predicted perfectly by any classifier
        if y.nunique() < 2:
            logger.debug(f"Response '{target}' is constant, accuracy is 1.0")
            return 1.0

        folds = KFold(n_splits=config.num_folds, shuffle=True, random_state=self.random_state)
        try:
            scores = cross_val_score(
                self._build_pipeline(config), X, y,
                cv=folds, scoring="accuracy", error_score="raise"
            )
        except ValueError as e:
            # e.g. a training fold that holds a single class
            raise MeasurementError(f"Classification of '{target}' failed: {e}") from e

        return float(np.mean(scores))

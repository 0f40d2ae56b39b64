"""
Model training from recorded outcomes.

Weights are learned with a gradient-like update: each feature's weight is
nudged by the average prediction error on the training split, scaled by
that feature's value. The new weights are validated on a held-out split
before they may replace the organization's active model.
"""
import logging
import math
import random
import uuid
from typing import Callable, Dict, List, Mapping, Optional, Sequence, Tuple

from lead_qualifier.core.exceptions import PersistenceError
from lead_qualifier.repositories.interfaces import ModelRepository, TrainingDataRepository
from lead_qualifier.schemas.features import FEATURE_KEYS
from lead_qualifier.schemas.outcome import OutcomeType, TrainingExample
from lead_qualifier.schemas.scoring import (
    ConfusionMatrix, ModelDraft, ModelMetrics, TrainingFailureReason, TrainingResult
)
from lead_qualifier.scoring.scorer import calculate_weighted_score
from lead_qualifier.scoring.weights import (
    DEFAULT_FEATURE_WEIGHTS, MAX_WEIGHT, MIN_WEIGHT, FeatureWeights, default_weights, normalize_weights
)

logger = logging.getLogger(__name__)

# Score each outcome should have received
TARGET_SCORES = {
    OutcomeType.CONVERTED: 85,
    OutcomeType.REJECTED: 30,
    OutcomeType.NO_RESPONSE: 40,
}
DEFAULT_TARGET_SCORE = 50

CONVERSION_THRESHOLD = 70  # predicted score counted as "likely to convert"
BASE_LEARNING_RATE = 0.1
DECAY_PASSES = 10
GRADIENT_SCALE = 0.01

NEGATIVE_OUTCOMES = (OutcomeType.REJECTED, OutcomeType.NO_RESPONSE)

SplitFunction = Callable[[Sequence[TrainingExample]], Tuple[List[TrainingExample], List[TrainingExample]]]


def target_score(outcome: OutcomeType) -> int:
    return TARGET_SCORES.get(outcome, DEFAULT_TARGET_SCORE)


def split_examples(
    examples: Sequence[TrainingExample],
    train_ratio: float = 0.8,
    rng: Optional[random.Random] = None,
) -> Tuple[List[TrainingExample], List[TrainingExample]]:
    """Shuffle, then split into train and test sets."""
    shuffled = list(examples)
    (rng or random.Random()).shuffle(shuffled)
    split_idx = int(math.floor(len(shuffled) * train_ratio))
    return shuffled[:split_idx], shuffled[split_idx:]


def adjust_weights(
    current_weights: Mapping[str, float],
    examples: Sequence[TrainingExample],
    learning_rate: float = BASE_LEARNING_RATE,
    include_behavioral: bool = True,
) -> FeatureWeights:
    """One gradient pass over the examples, followed by renormalization."""
    if not examples:
        return normalize_weights(current_weights)

    # Predictions use the weights from the start of the pass
    errors = [
        target_score(example.outcome)
        - calculate_weighted_score(example.features, current_weights, include_behavioral)
        for example in examples
    ]

    new_weights = {}
    for key in FEATURE_KEYS:
        gradient = sum(
            error * getattr(example.features, key)
            for error, example in zip(errors, examples)
        ) / len(examples)
        updated = current_weights.get(key, 0.0) + learning_rate * gradient * GRADIENT_SCALE
        new_weights[key] = max(MIN_WEIGHT, min(MAX_WEIGHT, updated))

    return normalize_weights(new_weights)


def train_weights(
    initial_weights: Mapping[str, float],
    examples: Sequence[TrainingExample],
    include_behavioral: bool = True,
) -> FeatureWeights:
    """An initial pass at the base rate, then passes with a decaying rate."""
    weights = adjust_weights(initial_weights, examples, BASE_LEARNING_RATE, include_behavioral)
    for i in range(DECAY_PASSES):
        weights = adjust_weights(weights, examples, BASE_LEARNING_RATE / (i + 1), include_behavioral)
    return weights


def calculate_feature_importance(examples: Sequence[TrainingExample]) -> Dict[str, float]:
    """
    How strongly each feature separates converted leads from rejected or
    unresponsive ones. Falls back to the default weights when either
    cohort is empty.
    """
    positives = [e for e in examples if e.outcome == OutcomeType.CONVERTED]
    negatives = [e for e in examples if e.outcome in NEGATIVE_OUTCOMES]

    if not positives or not negatives:
        return default_weights()

    importance = {}
    for key in FEATURE_KEYS:
        pos_avg = sum(getattr(e.features, key) for e in positives) / len(positives)
        neg_avg = sum(getattr(e.features, key) for e in negatives) / len(negatives)
        importance[key] = max(0.0, pos_avg - neg_avg + 0.5)

    total = sum(importance.values())
    if total <= 0:
        return default_weights()
    return {key: value / total for key, value in importance.items()}


def validate_model(
    weights: Mapping[str, float],
    test_examples: Sequence[TrainingExample],
    include_behavioral: bool = True,
) -> ModelMetrics:
    """Classification metrics for "likely to convert" on the held-out set."""
    tp = fp = tn = fn = 0
    for example in test_examples:
        predicted_positive = (
            calculate_weighted_score(example.features, weights, include_behavioral) >= CONVERSION_THRESHOLD
        )
        actual_positive = example.outcome == OutcomeType.CONVERTED
        if predicted_positive and actual_positive:
            tp += 1
        elif predicted_positive:
            fp += 1
        elif not actual_positive:
            tn += 1
        else:
            fn += 1

    total = len(test_examples)
    accuracy = (tp + tn) / total if total else 0.0
    precision = tp / (tp + fp) if (tp + fp) else 0.0
    recall = tp / (tp + fn) if (tp + fn) else 0.0
    f1_score = 2 * precision * recall / (precision + recall) if (precision + recall) else 0.0
    specificity = tn / ((tn + fp) or 1)
    auc = (recall + specificity) / 2

    return ModelMetrics(
        accuracy=accuracy,
        precision=precision,
        recall=recall,
        f1_score=f1_score,
        auc=auc,
        confusion_matrix=ConfusionMatrix(
            true_positives=tp,
            false_positives=fp,
            true_negatives=tn,
            false_negatives=fn,
        ),
        feature_importance=calculate_feature_importance(test_examples),
    )


class ModelTrainer:
    """
    Retrains an organization's scoring weights from its recorded outcomes.

    A run is deterministic for a fixed ``seed``; tests may also inject
    ``split_fn`` to control the train/test split entirely.
    """

    def __init__(
        self,
        training_data: TrainingDataRepository,
        models: ModelRepository,
        *,
        min_examples: int = 50,
        train_ratio: float = 0.8,
        accuracy_threshold: float = 0.5,
        include_behavioral: bool = True,
        seed: Optional[int] = None,
        split_fn: Optional[SplitFunction] = None,
    ):
        self.training_data = training_data
        self.models = models
        self.min_examples = min_examples
        self.train_ratio = train_ratio
        self.accuracy_threshold = accuracy_threshold
        self.include_behavioral = include_behavioral
        self.seed = seed
        self.split_fn = split_fn

    def _split(self, examples: Sequence[TrainingExample]):
        if self.split_fn is not None:
            return self.split_fn(examples)
        return split_examples(examples, self.train_ratio, random.Random(self.seed))

    async def train(self, organization_id: uuid.UUID) -> TrainingResult:
        try:
            examples = await self.training_data.fetch_outcomes_with_features(organization_id)
        except PersistenceError as e:
            logger.error(f"Could not load training data for org {organization_id}: {e.message}")
            return TrainingResult(
                success=False,
                error=e.message,
                reason=TrainingFailureReason.PERSISTENCE_ERROR,
            )

        if len(examples) < self.min_examples:
            return TrainingResult(
                success=False,
                error=(
                    f"Insufficient training data. Need at least {self.min_examples} "
                    f"outcomes, have {len(examples)}."
                ),
                reason=TrainingFailureReason.INSUFFICIENT_DATA,
                examples_count=len(examples),
            )

        train_set, test_set = self._split(examples)

        try:
            current_model = await self.models.get_active_model(organization_id)
        except PersistenceError as e:
            logger.error(f"Could not load active model for org {organization_id}: {e.message}")
            return TrainingResult(
                success=False,
                error=e.message,
                reason=TrainingFailureReason.PERSISTENCE_ERROR,
                examples_count=len(examples),
            )

        initial_weights = current_model.feature_weights if current_model else dict(DEFAULT_FEATURE_WEIGHTS)
        new_weights = train_weights(initial_weights, train_set, self.include_behavioral)
        metrics = validate_model(new_weights, test_set, self.include_behavioral)

        if metrics.accuracy < self.accuracy_threshold and current_model is not None:
            logger.warning(
                f"Rejected new model for org {organization_id}: accuracy {metrics.accuracy:.3f} "
                f"below {self.accuracy_threshold}, keeping v{current_model.model_version}"
            )
            return TrainingResult(
                success=False,
                error=(
                    f"New model accuracy ({metrics.accuracy * 100:.1f}%) is too low. "
                    f"Keeping current model."
                ),
                reason=TrainingFailureReason.ACCURACY_REGRESSION,
                metrics=metrics,
                examples_count=len(examples),
            )

        draft = ModelDraft(
            feature_weights=new_weights,
            performance_metrics=metrics,
            trained_on_count=len(examples),
        )
        try:
            model = await self.models.publish_model(organization_id, draft)
        except PersistenceError as e:
            logger.error(f"Failed to publish model for org {organization_id}: {e.message}")
            return TrainingResult(
                success=False,
                error=f"Failed to save model: {e.message}",
                reason=TrainingFailureReason.PERSISTENCE_ERROR,
                metrics=metrics,
                examples_count=len(examples),
            )

        logger.info(
            f"Published scoring model v{model.model_version} for org {organization_id} "
            f"(trained on {len(examples)}, accuracy {metrics.accuracy:.3f})"
        )
        return TrainingResult(
            success=True,
            model=model,
            metrics=metrics,
            examples_count=len(examples),
        )

from ..models import LibraryPolicy, PolicyMode
from .base import RetentionAlgorithm
from .by_age import ByAgeAlgorithm
from .by_count import ByCountAlgorithm
from .by_size import BySizeAlgorithm
from .utils import order_for_deletion


ALGORITHM_REGISTRY: dict[PolicyMode, RetentionAlgorithm] = {
    algorithm.mode: algorithm
    for algorithm in (ByAgeAlgorithm(), BySizeAlgorithm(), ByCountAlgorithm())
}


def get_algorithm(policy: LibraryPolicy) -> RetentionAlgorithm:
    """Pick the strategy for a policy; raises ConfigurationError unless exactly one mode is set."""
    return ALGORITHM_REGISTRY[policy.mode]


__all__ = [
    "RetentionAlgorithm",
    "ByAgeAlgorithm",
    "BySizeAlgorithm",
    "ByCountAlgorithm",
    "ALGORITHM_REGISTRY",
    "get_algorithm",
    "order_for_deletion",
]

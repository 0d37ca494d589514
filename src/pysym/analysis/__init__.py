from .classifier import OccurrenceClassifier, OccurrenceVisitor
from .walker import WalkResult, walk

__all__ = ["OccurrenceClassifier", "OccurrenceVisitor", "WalkResult", "walk"]

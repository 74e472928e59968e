"""
Content-type classification for hour-log descriptions.
"""
import json
import logging
from pathlib import Path

logger = logging.getLogger(__name__)

UNCLASSIFIED = "未分類"

CONTENT_TYPES_FILENAME = "content_types.json"

# Order is classification priority and default column order.
DEFAULT_CONTENT_TYPES = [
    "步道實作帶領",
    "回流訓練",
    "手作",
    "工作假期",
    "講座",
    "行政",
]


def load_content_types(project_root=None):
    """Load the ordered keyword list, falling back to the built-in list."""
    if project_root is None:
        project_root = Path(__file__).parent.parent
    path = Path(project_root) / "reference_data" / CONTENT_TYPES_FILENAME
    if not path.exists():
        logger.info(f"{path} not found, using built-in content types")
        return list(DEFAULT_CONTENT_TYPES)
    with open(path, 'r', encoding='utf-8') as f:
        types = json.load(f)
    if not isinstance(types, list):
        raise ValueError(f"{path} must contain a JSON list of keywords")
    return [str(t) for t in types if str(t).strip()]


class ContentTypeClassifier:
    """First keyword contained in the text wins (case-sensitive substring)."""

    def __init__(self, vocabulary=None):
        self.vocabulary = list(DEFAULT_CONTENT_TYPES if vocabulary is None else vocabulary)

    def classify(self, text):
        if not isinstance(text, str) or not text:
            return UNCLASSIFIED
        for keyword in self.vocabulary:
            if keyword in text:
                return keyword
        return UNCLASSIFIED

    def categories(self):
        """Vocabulary plus the unclassified bucket, in column order."""
        return self.vocabulary + [UNCLASSIFIED]

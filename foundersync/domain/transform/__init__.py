from .tokenizer import Row, serialize_rows, split_fields, split_logical_lines, tokenize
from .values import clean_value, parse_number
from .education import EducationParseError, summarize_education
from .normalizer import ColumnRule, Normalizer, NormalizerSpec
from .result import NormalizeResult, RowOutcome
from .sorting import sort_by_score_desc

__all__ = [
    "Row",
    "tokenize",
    "split_logical_lines",
    "split_fields",
    "serialize_rows",
    "clean_value",
    "parse_number",
    "EducationParseError",
    "summarize_education",
    "ColumnRule",
    "Normalizer",
    "NormalizerSpec",
    "NormalizeResult",
    "RowOutcome",
    "sort_by_score_desc",
]

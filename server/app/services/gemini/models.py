"""
Pydantic models for the Gemini document service.

This module contains the classification result and the comparison shapes
the model is asked to return, plus the flattened result handed to callers.
"""

from typing import Any, Dict, List, Literal, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator


DocumentClassification = Literal['invoice', 'purchase_order', 'bill', 'receipt', 'email', 'report', 'other']

DOCUMENT_CLASSIFICATIONS = ('invoice', 'purchase_order', 'bill', 'receipt', 'email', 'report', 'other')

FALSE_STRINGS = {'', 'false', 'no', '0', 'none', 'null'}


def coerce_match_flag(value: Any) -> bool:
    """Truthiness of a match flag; the model sometimes answers "partial" or "false"."""
    if isinstance(value, str):
        return value.strip().lower() not in FALSE_STRINGS
    return bool(value)


class ClassificationResult(BaseModel):
    """Quick seven-category classification of an uploaded file"""
    classification: DocumentClassification = Field(description="Detected document category")
    confidence: float = Field(description="Confidence score (0.0-1.0)")
    metadata: Dict[str, Any] = Field(default_factory=dict, description="Detected date, amount, entity, id")


class FieldComparison(BaseModel):
    """One field compared between the source and a target document"""
    model_config = ConfigDict(extra='allow')

    field: Optional[str] = Field(default=None, description="Field name")
    source_value: Any = Field(default=None, description="Value in the source document")
    target_value: Any = Field(default=None, description="Value in the target document")
    match: bool = Field(default=False, description="Whether the values match")
    match_percentage: float = Field(default=0.0, description="Match percentage (0-100)")
    weight: float = Field(default=0.0, description="Field weight (0-1)")
    mismatch_type: Any = Field(default=None, description="Kind of mismatch, if any")
    score: Any = Field(default=None, description="Weighted field score")
    reasoning: Any = Field(default=None, description="Why the values match or not")

    @field_validator('match_percentage', 'weight', mode='before')
    @classmethod
    def _default_to_zero(cls, value: Any) -> Any:
        if value is None:
            return 0.0
        if isinstance(value, str):
            # Model sometimes answers "85%" instead of 85
            try:
                return float(value.strip().rstrip('%') or 0)
            except ValueError:
                return 0.0
        return value

    @field_validator('match', mode='before')
    @classmethod
    def _coerce_match(cls, value: Any) -> bool:
        return coerce_match_flag(value)


class LineItemComparison(BaseModel):
    """Line-item level comparison for procurement documents"""
    model_config = ConfigDict(extra='allow')

    id: Any = None
    name: Any = None
    source_quantity: Any = None
    target_quantity: Any = None
    source_price: Any = None
    target_price: Any = None
    quantity_match: bool = False
    price_match: bool = False
    total_match: bool = False
    variance_percentage: Any = None
    target_index: Optional[int] = None

    @field_validator('quantity_match', 'price_match', 'total_match', mode='before')
    @classmethod
    def _coerce_matches(cls, value: Any) -> bool:
        return coerce_match_flag(value)


class ComparisonRow(BaseModel):
    """Flattened per-target field row shown in the results header table"""
    field: str
    source_value: Any = "N/A"
    target_value: Any = "N/A"
    match: bool = False


class DetailedComparisonResult(BaseModel):
    """Complete comparison result returned to API callers"""
    comparison_id: Optional[str] = Field(default=None, description="Stored comparison id")
    overall_match: int = Field(description="Rounded summary match score")
    header_results: List[ComparisonRow] = Field(default_factory=list)
    line_items: List[LineItemComparison] = Field(default_factory=list)
    source_document: Dict[str, Any] = Field(default_factory=dict)
    target_documents: List[Dict[str, Any]] = Field(default_factory=list)
    comparison_summary: Dict[str, Any] = Field(default_factory=dict, description="Summary plus target_specific_results")
    from_cache: bool = Field(default=False, description="Loaded from a previously stored comparison")

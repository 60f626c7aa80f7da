"""
Field comparison rendering.

Matching happens upstream in the model; this module only turns the
precomputed per-field records into display rows and CSV exports.
"""

import csv
import json
import logging
import math
from datetime import date
from typing import Any, Dict, Iterable, List, Optional, Union

import pandas as pd
from pydantic import BaseModel

from app.services.gemini.models import DetailedComparisonResult, FieldComparison

logger = logging.getLogger(__name__)

CSV_COLUMNS = [
    'Document Type',
    'Source Document',
    'Target Document',
    'Field',
    'Source Value',
    'Target Value',
    'Match Percentage',
    'Weight',
    'Status',
    'Issues',
    'Recommendations'
]

LINE_ITEM_KEYS = ('description', 'partDescription', 'quantity', 'amount')
LINE_ITEM_FIELD_NAMES = ('line_items', 'lineItems')


class FieldComparisonRow(BaseModel):
    """One display row of the field comparison table"""
    field: str
    source_value: str
    target_value: str
    match_percentage: str
    weight: str
    status: str
    band: str


def _compact_json(value: Any) -> str:
    return json.dumps(value, separators=(',', ':'), ensure_ascii=False, default=str)


def _scalar_text(value: Any) -> str:
    if isinstance(value, bool):
        return 'true' if value else 'false'
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _looks_like_line_items(value: List[Any]) -> bool:
    first = value[0]
    return isinstance(first, dict) and any(key in first for key in LINE_ITEM_KEYS)


def format_value(value: Any) -> str:
    """Flatten a compared value (possibly nested) into a display string."""
    if value is None:
        return 'N/A'

    if isinstance(value, list):
        if not value:
            return '[]'
        if _looks_like_line_items(value):
            return f'[{len(value)} line items - see Line Items table]'
        return ', '.join(
            _compact_json(item) if isinstance(item, (dict, list)) else _scalar_text(item)
            for item in value
        )

    if isinstance(value, dict):
        if value.get('description') or value.get('partDescription'):
            return str(value.get('description') or value.get('partDescription'))
        if value.get('amount') or value.get('total'):
            return _scalar_text(value.get('amount') or value.get('total'))
        if value.get('quantity'):
            return _scalar_text(value.get('quantity'))
        return _compact_json(value)

    return _scalar_text(value)


def format_csv_value(value: Any) -> str:
    """CSV flavour of format_value: nested values are written as JSON."""
    if value is None:
        return 'N/A'

    if isinstance(value, list):
        if not value:
            return '[]'
        return ', '.join(
            item if isinstance(item, str)
            else _compact_json(item) if isinstance(item, (dict, list))
            else _scalar_text(item)
            for item in value
        )

    if isinstance(value, dict):
        return _compact_json(value)

    return _scalar_text(value)


def _field_name(field: Union[FieldComparison, Dict[str, Any]]) -> Optional[str]:
    if isinstance(field, dict):
        return field.get('field')
    return field.field


def filter_field_comparisons(fields: Iterable[Any]) -> List[Any]:
    """Drop line-item fields; those are shown in the line items table."""
    filtered = []
    for field in fields or []:
        name = _field_name(field)
        if name in LINE_ITEM_FIELD_NAMES:
            continue
        if name and 'line_item' in str(name).lower():
            continue
        filtered.append(field)
    return filtered


def match_band(score: Optional[float]) -> str:
    score = score or 0
    if score >= 80:
        return 'high'
    if score >= 60:
        return 'medium'
    return 'low'


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _format_percentage(match_percentage: float) -> str:
    return f'{match_percentage:.1f}%'


def _format_weight(weight: float) -> str:
    return f'{_round_half_up(weight * 100)}%'


def _as_field_comparison(field: Union[FieldComparison, Dict[str, Any]]) -> FieldComparison:
    if isinstance(field, FieldComparison):
        return field
    return FieldComparison.model_validate(field)


def render_field_comparisons(fields: Iterable[Any]) -> List[FieldComparisonRow]:
    """
    Render per-field comparison records as display rows.

    Line-item fields are filtered out first; missing match_percentage and
    weight count as 0.
    """
    rows = []
    for raw in filter_field_comparisons(fields):
        field = _as_field_comparison(raw)
        rows.append(FieldComparisonRow(
            field=field.field or 'Unknown Field',
            source_value=format_value(field.source_value),
            target_value=format_value(field.target_value),
            match_percentage=_format_percentage(field.match_percentage),
            weight=_format_weight(field.weight),
            status='Match' if field.match else 'No Match',
            band=match_band(field.match_percentage)
        ))
    return rows


def _joined_or_default(values: Any, default: str) -> str:
    if not values:
        return default
    return '; '.join(str(value) for value in values) or default


def build_csv_rows(detailed: DetailedComparisonResult) -> List[Dict[str, str]]:
    """One CSV record per field per target, in target order."""
    source_document = detailed.source_document or {}
    source_type = source_document.get('doc_type') or 'Unknown'
    source_title = source_document.get('title') or 'Unknown'

    records = []
    targets = (detailed.comparison_summary or {}).get('target_specific_results') or []
    for target_index, target in enumerate(targets):
        if not isinstance(target, dict) or not isinstance(target.get('fields'), list):
            continue

        target_doc = detailed.target_documents[target_index] if target_index < len(detailed.target_documents) else {}
        target_title = target_doc.get('title') or 'Unknown'

        analysis = target.get('detailed_analysis') or {}
        issues = _joined_or_default(analysis.get('critical_issues'), 'No issues')
        recommendations = _joined_or_default(analysis.get('recommendations'), 'No recommendations')

        for raw in target['fields']:
            field = _as_field_comparison(raw)
            records.append({
                'Document Type': source_type,
                'Source Document': source_title,
                'Target Document': target_title,
                'Field': field.field or 'Unknown Field',
                'Source Value': format_csv_value(field.source_value),
                'Target Value': format_csv_value(field.target_value),
                'Match Percentage': _format_percentage(field.match_percentage),
                'Weight': _format_weight(field.weight),
                'Status': 'Match' if field.match else 'No Match',
                'Issues': issues,
                'Recommendations': recommendations
            })
    return records


def export_comparison_csv(detailed: Union[DetailedComparisonResult, Dict[str, Any]]) -> str:
    """
    Export a comparison result as CSV text.

    Returns:
        CSV content with the header row followed by one row per compared field
    """
    if isinstance(detailed, dict):
        detailed = DetailedComparisonResult.model_validate(detailed)

    records = build_csv_rows(detailed)
    df = pd.DataFrame(records, columns=CSV_COLUMNS)

    logger.info(f"📊 Exporting {len(df)} comparison rows to CSV")
    return df.to_csv(index=False, quoting=csv.QUOTE_MINIMAL, lineterminator='\n')


def comparison_csv_filename(day: Optional[date] = None) -> str:
    day = day or date.today()
    return f"comparison-results-{day.isoformat()}.csv"

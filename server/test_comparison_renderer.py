#!/usr/bin/env python3
"""
Tests for field comparison rendering and CSV export
"""

import csv
import io
from datetime import date

from app.services.comparison_renderer import (
    CSV_COLUMNS,
    comparison_csv_filename,
    export_comparison_csv,
    filter_field_comparisons,
    format_csv_value,
    format_value,
    match_band,
    render_field_comparisons
)
from app.services.gemini.models import DetailedComparisonResult


def test_format_value_scalars():
    assert format_value(None) == "N/A"
    assert format_value("ACME Corp") == "ACME Corp"
    assert format_value(1250.0) == "1250"
    assert format_value(12.5) == "12.5"
    assert format_value(True) == "true"


def test_format_value_line_items_are_summarized():
    items = [{"description": "Bolts", "quantity": 10}, {"description": "Nuts", "quantity": 5}]
    assert format_value(items) == "[2 line items - see Line Items table]"


def test_format_value_lists_and_objects():
    assert format_value(["a", "b"]) == "a, b"
    assert format_value([{"sku": "A1"}]) == '{"sku":"A1"}'
    assert format_value([]) == "[]"
    assert format_value({"description": "Widget", "amount": 5}) == "Widget"
    assert format_value({"total": 99.5}) == "99.5"
    assert format_value({"quantity": 3}) == "3"
    assert format_value({"street": "1 Main St"}) == '{"street":"1 Main St"}'


def test_filter_drops_line_item_fields():
    fields = [
        {"field": "vendor_name"},
        {"field": "line_items"},
        {"field": "lineItems"},
        {"field": "Line_Items_Total"},
        {"field": None},
    ]
    assert [f["field"] for f in filter_field_comparisons(fields)] == ["vendor_name", None]


def test_match_band_thresholds():
    assert match_band(80) == "high"
    assert match_band(79.9) == "medium"
    assert match_band(60) == "medium"
    assert match_band(59.9) == "low"
    assert match_band(None) == "low"


def test_render_defaults_missing_percentage_and_weight():
    rows = render_field_comparisons([
        {"field": "total_amount", "source_value": 100, "target_value": 100, "match": True,
         "match_percentage": 100, "weight": 0.125},
        {"source_value": None, "target_value": "X"},
    ])

    assert rows[0].match_percentage == "100.0%"
    assert rows[0].weight == "13%"
    assert rows[0].status == "Match"
    assert rows[0].band == "high"

    assert rows[1].field == "Unknown Field"
    assert rows[1].source_value == "N/A"
    assert rows[1].match_percentage == "0.0%"
    assert rows[1].weight == "0%"
    assert rows[1].status == "No Match"
    assert rows[1].band == "low"


def test_non_boolean_match_flags_are_coerced():
    rows = render_field_comparisons([
        {"field": "vendor", "match": "partial", "match_percentage": 70},
        {"field": "total", "match": "false"},
        {"field": "date", "match": 1},
        {"field": "terms", "match": 0},
    ])

    assert [row.status for row in rows] == ["Match", "No Match", "Match", "No Match"]


def test_export_accepts_non_boolean_match():
    content = export_comparison_csv({
        "overall_match": 50,
        "source_document": {"title": "PO.pdf", "doc_type": "Purchase Order"},
        "target_documents": [{"index": 0, "title": "INV.pdf"}],
        "comparison_summary": {"target_specific_results": [
            {"fields": [{"field": "vendor", "match": "partial", "match_percentage": "70%"}]}
        ]}
    })

    record = dict(zip(CSV_COLUMNS, list(csv.reader(io.StringIO(content)))[1]))
    assert record["Status"] == "Match"
    assert record["Match Percentage"] == "70.0%"


def _detailed_result():
    return DetailedComparisonResult(
        overall_match=72,
        source_document={"title": "PO-100.pdf", "doc_type": "Purchase Order"},
        target_documents=[{"index": 0, "title": "INV-7.pdf", "type": "Invoice", "json": {}}],
        comparison_summary={
            "match_score": 72,
            "target_specific_results": [{
                "title": "INV-7.pdf",
                "fields": [
                    {"field": "vendor", "source_value": 'ACME "Global"', "target_value": "ACME",
                     "match": False, "match_percentage": 65, "weight": 0.2},
                    {"field": "items", "source_value": ["bolts", {"sku": "N1"}], "target_value": None,
                     "match": True, "match_percentage": 90.5, "weight": 0.5},
                ],
                "detailed_analysis": {
                    "critical_issues": ["Vendor name differs", "Missing PO reference"],
                    "recommendations": []
                }
            }]
        }
    )


def test_export_csv_rows_and_quoting():
    content = export_comparison_csv(_detailed_result())

    assert content.splitlines()[0] == ",".join(CSV_COLUMNS)

    records = list(csv.reader(io.StringIO(content)))
    assert len(records) == 3

    vendor = dict(zip(CSV_COLUMNS, records[1]))
    assert vendor["Document Type"] == "Purchase Order"
    assert vendor["Source Document"] == "PO-100.pdf"
    assert vendor["Target Document"] == "INV-7.pdf"
    assert vendor["Source Value"] == 'ACME "Global"'
    assert vendor["Match Percentage"] == "65.0%"
    assert vendor["Weight"] == "20%"
    assert vendor["Status"] == "No Match"
    assert vendor["Issues"] == "Vendor name differs; Missing PO reference"
    assert vendor["Recommendations"] == "No recommendations"

    items = dict(zip(CSV_COLUMNS, records[2]))
    assert items["Source Value"] == 'bolts, {"sku":"N1"}'
    assert items["Target Value"] == "N/A"
    assert items["Match Percentage"] == "90.5%"
    assert items["Status"] == "Match"

    # Embedded quotes are doubled in the raw CSV text
    assert '"ACME ""Global"""' in content


def test_export_csv_without_targets_has_only_header():
    content = export_comparison_csv({"overall_match": 0})
    assert content.strip() == ",".join(CSV_COLUMNS)


def test_format_csv_value():
    assert format_csv_value(None) == "N/A"
    assert format_csv_value([]) == "[]"
    assert format_csv_value({"a": 1}) == '{"a":1}'
    assert format_csv_value(False) == "false"


def test_csv_filename():
    assert comparison_csv_filename(date(2024, 3, 9)) == "comparison-results-2024-03-09.csv"

"""
Table consolidation for multi-page extractions.

Tables extracted page by page are grouped by a normalized header signature
and every group with more than one member is merged into a single logical
table. Tables without ``headers`` or ``rows`` are skipped.
"""

import itertools
import logging
import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)

MERGED_TABLE_CONFIDENCE = 0.85

_table_counter = itertools.count(1)


@dataclass
class ConsolidationResult:
    """Consolidated tables plus the number of malformed inputs that were dropped."""
    tables: List[Any] = field(default_factory=list)
    skipped_count: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {"tables": self.tables, "skipped_count": self.skipped_count}


def header_signature(headers: List[str]) -> str:
    """Order-, case- and whitespace-insensitive key for a header row."""
    return "|".join(sorted(str(header).strip().lower() for header in headers))


def _page_number(table: Dict[str, Any]) -> Optional[int]:
    page = table.get("pageNumber", table.get("page_number"))
    try:
        page = int(page)
    except (TypeError, ValueError):
        return None
    # Page 0 is treated as "no page"
    return page if page else None


def _new_table_id() -> str:
    return f"pdf-merged-table-{int(time.time() * 1000)}-{next(_table_counter)}"


def merge_tables(tables: List[Dict[str, Any]], file_name: str) -> Dict[str, Any]:
    """Merge tables sharing a header signature into one consolidated table."""
    headers = list(tables[0]["headers"])

    all_rows = []
    page_numbers = []
    for table in tables:
        all_rows.extend(table["rows"])
        page = _page_number(table)
        if page is not None:
            page_numbers.append(page)

    page_numbers.sort()
    if page_numbers:
        title = f"Table from {file_name} (Pages {page_numbers[0]}-{page_numbers[-1]})"
    else:
        title = f"Table from {file_name}"

    return {
        "tableId": _new_table_id(),
        "source": file_name,
        "title": title,
        "headers": headers,
        "rows": all_rows,
        "confidence": MERGED_TABLE_CONFIDENCE,
        "mergedFromPages": page_numbers
    }


def consolidate_tables_with_report(tables: Optional[List[Any]], file_name: str) -> ConsolidationResult:
    """
    Consolidate tables extracted from multiple pages.

    Args:
        tables: Raw per-page tables ({headers, rows, pageNumber?})
        file_name: Originating file, used for the merged table source and title

    Returns:
        ConsolidationResult with tables in first-seen signature order
    """
    if not tables or len(tables) <= 1:
        return ConsolidationResult(tables=list(tables or []))

    logger.info(f"🔗 Consolidating {len(tables)} tables extracted from {file_name}")

    # dicts keep insertion order, so signatures stay in first-seen order
    table_groups: Dict[str, List[Dict[str, Any]]] = {}
    skipped = 0

    for index, table in enumerate(tables):
        if not isinstance(table, dict) or table.get("headers") is None or table.get("rows") is None:
            skipped += 1
            logger.warning(f"⚠️ Skipping table {index} from {file_name}: missing headers or rows")
            continue

        signature = header_signature(table["headers"])
        table_groups.setdefault(signature, []).append(table)

    consolidated = []
    for signature, group in table_groups.items():
        if len(group) == 1:
            consolidated.append(group[0])
        else:
            logger.info(f"📋 Merging {len(group)} tables with headers: {signature}")
            consolidated.append(merge_tables(group, file_name))

    logger.info(f"✅ Consolidated {len(tables)} tables into {len(consolidated)} tables")
    return ConsolidationResult(tables=consolidated, skipped_count=skipped)


def consolidate_tables(tables: Optional[List[Any]], file_name: str) -> List[Any]:
    """Best-effort consolidation; malformed tables are dropped."""
    return consolidate_tables_with_report(tables, file_name).tables

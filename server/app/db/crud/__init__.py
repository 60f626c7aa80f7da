# Import all CRUD functions from modular files
from .documents import (
    create_comparison_document,
    get_comparison_document,
    get_comparison_documents_by_ids,
    list_comparison_documents
)

from .comparisons import (
    get_latest_comparison,
    get_comparison_result,
    save_comparison_result,
    list_comparison_results
)

from .organizations import (
    DEFAULT_ORGANIZATIONS,
    organization_to_dict,
    get_all_organizations,
    get_organization_by_id,
    get_organization_by_name,
    create_organization,
    update_organization,
    increment_document_count,
    initialize_default_organizations
)

# =============================================================================
# lib/ - Standalone Utility Modules
# =============================================================================
# This package contains reusable utilities:
# - origins.py: BASE_PATH / origin normalization and CORS allowlist building
# - supabase_client.py: Supabase client singleton and startup connection check
# - utils.py: Shared utilities (UUID normalization, month arithmetic)
#
# origins.py and utils.py have no third-party dependencies and can be tested
# in isolation.
# =============================================================================

from lib.origins import build_allowlist, normalize_base_path, normalize_origin
from lib.utils import add_months, normalize_uuid, previous_month_range

__all__ = [
    # Origins
    "build_allowlist",
    "normalize_base_path",
    "normalize_origin",
    # Utils
    "add_months",
    "normalize_uuid",
    "previous_month_range",
]

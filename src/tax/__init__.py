"""Tax tables, filing statuses and law-version policy."""

from src.tax.filing_status import FilingStatus
from src.tax.loader import TaxTableLoadError, load_tax_year_config
from src.tax.policy import PolicySettings, get_salt_cap, resolve_policy
from src.tax.year_config import (
    TAX_YEAR_2024,
    TAX_YEAR_2025,
    TAX_YEAR_CONFIGS,
    Bracket,
    BracketSchedule,
    TaxYearConfig,
    get_tax_year_config,
)

__all__ = [
    "Bracket",
    "BracketSchedule",
    "FilingStatus",
    "PolicySettings",
    "TaxTableLoadError",
    "TaxYearConfig",
    "TAX_YEAR_2024",
    "TAX_YEAR_2025",
    "TAX_YEAR_CONFIGS",
    "get_salt_cap",
    "get_tax_year_config",
    "load_tax_year_config",
    "resolve_policy",
]

from .loader import load_settings, load_settings_with_overrides
from .schema import CalcSettings, ParseSettings, PnPsSettings, ResultType

__all__ = [
    "load_settings",
    "load_settings_with_overrides",
    "PnPsSettings",
    "ParseSettings",
    "CalcSettings",
    "ResultType",
]

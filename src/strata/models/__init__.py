from strata.models.args import ContextArgs
from strata.models.context import Context
from strata.models.data import ContextData, DataKey, data_key

__all__ = [
    "Context",
    "ContextArgs",
    "ContextData",
    "DataKey",
    "data_key",
]

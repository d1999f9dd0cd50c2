from .network import ws_url, set_query_param
from .ids import to_base36, request_id_factory

__all__ = ["request_id_factory", "set_query_param", "to_base36", "ws_url"]

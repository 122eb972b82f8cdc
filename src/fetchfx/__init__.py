"""fetchfx: reactive request orchestration for data-fetching UI bindings."""

from importlib.metadata import version as _version

__version__ = _version("fetchfx")

from fetchfx._tracking import get_pending_count
from fetchfx.observable import Observable, ObservableList
from fetchfx.reaction import Reaction, autorun, reaction
from fetchfx.action import transaction
from fetchfx.stream import EventStream
from fetchfx.state import FetchState, RequestInfo, ResponseInfo
from fetchfx.errors import DecodeError, FetchError, TransportError
from fetchfx.config import FetchConfig
from fetchfx.cache import ResponseCache, make_signature
from fetchfx.decode import DefaultDecoder, MappingDecoder, OverrideDecoder, resolve_decoder
from fetchfx.reducer import DataReducer
from fetchfx.transport import HttpxTransport
from fetchfx.channel import StateChannel
from fetchfx.orchestrator import Operation, RequestOrchestrator
# textual binding is not auto-imported: opt-in only

__all__ = [
    "Observable",
    "ObservableList",
    "Reaction",
    "autorun",
    "reaction",
    "transaction",
    "get_pending_count",
    "EventStream",
    "FetchState",
    "RequestInfo",
    "ResponseInfo",
    "FetchError",
    "TransportError",
    "DecodeError",
    "FetchConfig",
    "ResponseCache",
    "make_signature",
    "DefaultDecoder",
    "MappingDecoder",
    "OverrideDecoder",
    "resolve_decoder",
    "DataReducer",
    "HttpxTransport",
    "StateChannel",
    "Operation",
    "RequestOrchestrator",
]

import itertools
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, Optional, Set
from models.errors import PoiStoreError

logger = logging.getLogger(__name__)


class RequestState(Enum):
    PENDING = "pending"
    SUCCESS = "success"
    ERROR = "error"
    DISCARDED = "discarded"


@dataclass
class Request:
    id: int
    view: str
    state: RequestState = RequestState.PENDING
    result: Any = None
    error: Optional[PoiStoreError] = None


@dataclass
class RequestTracker:
    """Per-view request lifecycles with stale-response discarding.

    A view has at most one current request. Starting a new one supersedes the
    old one, and closing the view discards whatever is still pending, so a late
    result is never applied to a view that has moved on.
    """

    _ids: Any = field(default_factory=itertools.count)
    _current: Dict[str, Request] = field(default_factory=dict)
    _closed: Set[str] = field(default_factory=set)

    def begin(self, view: str) -> Request:
        previous = self._current.get(view)
        if previous is not None and previous.state == RequestState.PENDING:
            previous.state = RequestState.DISCARDED
        self._closed.discard(view)
        request = Request(id=next(self._ids), view=view)
        self._current[view] = request
        return request

    def _is_live(self, request: Request) -> bool:
        return (
            request.view not in self._closed
            and self._current.get(request.view) is request
            and request.state == RequestState.PENDING
        )

    def succeed(self, request: Request, result: Any = None) -> bool:
        if not self._is_live(request):
            request.state = RequestState.DISCARDED
            logger.debug(f"Discarded stale result for {request.view}#{request.id}")
            return False
        request.state = RequestState.SUCCESS
        request.result = result
        return True

    def fail(self, request: Request, error: PoiStoreError) -> bool:
        if not self._is_live(request):
            request.state = RequestState.DISCARDED
            return False
        request.state = RequestState.ERROR
        request.error = error
        return True

    def close_view(self, view: str):
        self._closed.add(view)
        request = self._current.get(view)
        if request is not None and request.state == RequestState.PENDING:
            request.state = RequestState.DISCARDED

    def latest(self, view: str) -> Optional[Request]:
        return self._current.get(view)

    def is_pending(self, view: str) -> bool:
        request = self._current.get(view)
        return request is not None and request.state == RequestState.PENDING

    def run(self, view: str, fn: Callable[..., Any], *args, **kwargs) -> Request:
        request = self.begin(view)
        try:
            result = fn(*args, **kwargs)
        except PoiStoreError as e:
            self.fail(request, e)
            return request
        self.succeed(request, result)
        return request

"""Resolution client: cache-first registry lookups for a subject."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from claimbroker.domain.errors import RegistryError, TransportError
from claimbroker.domain.model import (
    Error,
    Found,
    NotFound,
    RegistryRequest,
    RequestKind,
)
from claimbroker.domain.ports.observability import EventKind, NullEventSink

from .cache import cache_key_for
from .classification import acknowledgement_error, as_exception, classify, transport_error
from .retry import AttemptPolicy

if TYPE_CHECKING:
    from claimbroker.domain.model import RegistryReply, ResolutionOutcome, Subject
    from claimbroker.domain.ports import EventSink, RegistryTransport, ResponseDecoder

    from .cache import IdentityCache

log = getLogger(__name__)


class ResolutionClient:
    """Looks up a subject's registry profile, caching non-error outcomes.

    Collaborators are injected; the caller owns their lifecycle.
    """

    def __init__(
        self,
        *,
        transport: RegistryTransport,
        decoder: ResponseDecoder,
        cache: IdentityCache,
        policy: AttemptPolicy | None = None,
        sink: EventSink | None = None,
    ) -> None:
        self._transport = transport
        self._decoder = decoder
        self._cache = cache
        self._policy = policy or AttemptPolicy()
        self._sink = sink or NullEventSink()

    def cache_key(self, subject: Subject) -> str:
        return cache_key_for(subject)

    def resolve(self, subject: Subject) -> ResolutionOutcome:
        key = self.cache_key(subject)
        entry = self._cache.get(key)
        if entry is not None:
            self._sink.emit(EventKind.CACHE_HIT, key, kind=entry.outcome.kind)
            return entry.outcome

        self._sink.emit(EventKind.CACHE_MISS, key)
        reply = self.exchange(RegistryRequest(RequestKind.SEARCH, subject), key=key)
        outcome = reply if isinstance(reply, Error) else classify(reply)
        self._cache.put(key, outcome)
        log.info("Resolved %s: %s", key, outcome.kind)
        return outcome

    def exchange(self, request: RegistryRequest, *, key: str) -> RegistryReply | Error:
        """Send ``request`` under the retry policy and decode the reply.

        Returns the classified error instead of raising once the policy gives up.
        """

        def attempt() -> RegistryReply:
            try:
                raw = self._transport.send(request)
            except TransportError as exc:
                raise as_exception(transport_error(exc)) from exc
            reply = self._decoder.decode(raw, kind=request.kind)
            error = acknowledgement_error(reply)
            if error is not None:
                raise as_exception(error)
            return reply

        try:
            return self._policy.call(attempt, sink=self._sink, key=key)
        except RegistryError as exc:
            log.warning("Registry %s for %s failed: %s", request.kind, key, exc)
            return Error(exc.cause, detail=str(exc))

    def cache_outcome(self, subject: Subject, outcome: ResolutionOutcome) -> None:
        """Store a prefetched outcome for ``subject`` (errors are ignored)."""

        self._cache.put(self.cache_key(subject), outcome)

    def forget(self, subject: Subject) -> None:
        self._cache.invalidate(self.cache_key(subject))

    def icn_for(self, subject: Subject) -> str | None:
        """Return the subject's ICN, ``None`` when the registry has no record.

        Raises :class:`RegistryError` when the lookup itself failed.
        """

        match self.resolve(subject):
            case Found(profile):
                return profile.icn
            case NotFound():
                return None
            case Error() as error:
                raise as_exception(error)

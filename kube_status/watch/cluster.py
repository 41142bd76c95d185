"""Watch source backed by the kubernetes API server.

The official client is synchronous, so each watch runs in a daemon thread that
hands events to the event loop one at a time. The thread waits for every
event to be accepted before reading the next one.
"""

import asyncio
from collections.abc import AsyncGenerator
import logging
import threading
from typing import Any

import kubernetes
from kubernetes.client.rest import ApiException
from kubernetes.dynamic import DynamicClient
from kubernetes.dynamic.exceptions import DynamicApiError, ResourceNotFoundError

from kube_status.exceptions import WatchException
from kube_status.resource import WatchEvent
from kube_status.snapshot import get_int, get_str

from .source import WatchSource

__all__ = [
    "KubernetesWatchSource",
]

_LOGGER = logging.getLogger(__name__)

DEFAULT_NAMESPACE = "default"
ERROR_EVENT = "ERROR"
HTTP_GONE = 410


class _StreamError:
    """Passed from the watch thread when the client raises."""

    def __init__(self, err: Exception) -> None:
        self.err = err


class KubernetesWatchSource(WatchSource):
    """Opens watches using the dynamic client and the local kubeconfig."""

    def __init__(
        self, kubeconfig: str | None = None, context: str | None = None
    ) -> None:
        """Initialize the KubernetesWatchSource.

        Args:
            kubeconfig: Optional path to a kubeconfig file, otherwise the
                client defaults are used (e.g. `$KUBECONFIG`).
            context: Optional kubeconfig context to use.
        """
        self._kubeconfig = kubeconfig
        self._context = context
        self._client: DynamicClient | None = None

    def _dynamic_client(self) -> DynamicClient:
        if self._client is None:
            try:
                api_client = kubernetes.config.new_client_from_config(
                    config_file=self._kubeconfig, context=self._context
                )
            except kubernetes.config.ConfigException as err:
                raise WatchException(
                    "kubeconfig", f"Unable to read kubectl config: {err}"
                ) from err
            self._client = DynamicClient(api_client)
        return self._client

    def default_namespace(self) -> str:
        """Return the namespace of the active kubeconfig context."""
        try:
            contexts, active = kubernetes.config.list_kube_config_contexts(
                config_file=self._kubeconfig
            )
        except kubernetes.config.ConfigException as err:
            raise WatchException(
                "kubeconfig", f"Unable to read kubectl config: {err}"
            ) from err
        if self._context:
            active = next(
                (ctx for ctx in contexts if ctx.get("name") == self._context), active
            )
        namespace = (active or {}).get("context", {}).get("namespace")
        return namespace or DEFAULT_NAMESPACE

    def _resource(self, api_version: str, kind: str) -> Any:
        client = self._dynamic_client()
        try:
            return client.resources.get(api_version=api_version, kind=kind)
        except ResourceNotFoundError as err:
            raise WatchException(
                f"{api_version}/{kind}", f"Unknown resource type: {err}"
            ) from err
        except DynamicApiError as err:
            raise WatchException(f"{api_version}/{kind}", str(err)) from err

    async def open(
        self, api_version: str, kind: str, namespace: str | None
    ) -> AsyncGenerator[WatchEvent, None]:
        """Resolve the kind and return a stream of its watch events."""
        resource = await asyncio.to_thread(self._resource, api_version, kind)
        _LOGGER.debug(
            "Resolved %s/%s to %s", api_version, kind, getattr(resource, "name", kind)
        )
        return self._stream(resource, f"{api_version}/{kind}", namespace)

    def _pump(
        self,
        resource: Any,
        namespace: str | None,
        loop: asyncio.AbstractEventLoop,
        queue: "asyncio.Queue[WatchEvent | _StreamError]",
        stop: threading.Event,
    ) -> None:
        """Read the blocking watch in a thread, re-opening it when the server closes it.

        The watch resumes from the last resource version seen so that the
        server does not replay existing objects as new ones. Only when that
        version has expired is the watch started again from a fresh list.
        """
        resource_version: str | None = None
        try:
            while not stop.is_set():
                try:
                    for raw in resource.watch(
                        namespace=namespace, resource_version=resource_version
                    ):
                        if stop.is_set():
                            return
                        raw_object = raw.get("raw_object")
                        if raw.get("type") == ERROR_EVENT:
                            if get_int(raw_object, "code") == HTTP_GONE:
                                _LOGGER.debug(
                                    "Resource version %s of %s expired",
                                    resource_version,
                                    resource,
                                )
                                resource_version = None
                                break
                            _LOGGER.warning(
                                "Watch on %s returned error: %s",
                                resource,
                                get_str(raw_object, "message", default=""),
                            )
                            continue
                        resource_version = get_str(
                            raw_object,
                            "metadata",
                            "resourceVersion",
                            default=resource_version,
                        )
                        event = WatchEvent.parse(
                            {"type": raw.get("type"), "object": raw_object}
                        )
                        if event is None:
                            continue
                        asyncio.run_coroutine_threadsafe(
                            queue.put(event), loop
                        ).result()
                except ApiException as err:
                    if err.status != HTTP_GONE:
                        raise
                    _LOGGER.debug("Resource version %s expired", resource_version)
                    resource_version = None
                _LOGGER.debug(
                    "Watch on %s closed, re-opening at resource version %s",
                    resource,
                    resource_version,
                )
        except Exception as err:  # pylint: disable=broad-except
            if not stop.is_set():
                asyncio.run_coroutine_threadsafe(
                    queue.put(_StreamError(err)), loop
                ).result()

    async def _stream(
        self, resource: Any, label: str, namespace: str | None
    ) -> AsyncGenerator[WatchEvent, None]:
        loop = asyncio.get_running_loop()
        queue: asyncio.Queue[WatchEvent | _StreamError] = asyncio.Queue(maxsize=1)
        stop = threading.Event()
        thread = threading.Thread(
            target=self._pump,
            args=(resource, namespace, loop, queue, stop),
            name=f"watch-{label}",
            daemon=True,
        )
        thread.start()
        try:
            while True:
                item = await queue.get()
                if isinstance(item, _StreamError):
                    raise WatchException(label, str(item.err)) from item.err
                yield item
        finally:
            stop.set()

"""Operation executor: runs bridge calls off the loop thread.

Every submitted request ends in exactly one OperationResult handed to the
`deliver` callback, whether the call succeeded, failed, timed out, or could
not be launched at all.
"""

from __future__ import annotations

import subprocess
import threading
from collections.abc import Callable
from concurrent.futures import Future
from typing import Any

import structlog

from lazyadb.bridge.client import AdbClient
from lazyadb.errors import BridgeError
from lazyadb.operations import OperationKind, OperationRequest, OperationResult

logger = structlog.get_logger()

Deliver = Callable[[OperationResult], None]


def _require_target(request: OperationRequest) -> str:
    if not request.target:
        raise BridgeError(f"{request.kind.value} needs a target device")
    return request.target


def _list_devices(client: AdbClient, request: OperationRequest) -> Any:
    return client.devices()


def _list_avds(client: AdbClient, request: OperationRequest) -> Any:
    return client.avds_with_status()


def _device_info(client: AdbClient, request: OperationRequest) -> Any:
    device = request.param("device")
    if device is None:
        raise BridgeError("device info needs a device")
    return client.fetch_device_info(device)


def _shell(client: AdbClient, request: OperationRequest) -> Any:
    return client.shell(_require_target(request), str(request.param("command", "")))


def _install(client: AdbClient, request: OperationRequest) -> Any:
    return client.install(_require_target(request), str(request.param("apk_path", "")))


def _uninstall(client: AdbClient, request: OperationRequest) -> Any:
    return client.uninstall(_require_target(request), str(request.param("package", "")))


def _reboot(client: AdbClient, request: OperationRequest) -> Any:
    return client.reboot(_require_target(request), str(request.param("mode", "")))


def _disconnect(client: AdbClient, request: OperationRequest) -> Any:
    return client.disconnect(_require_target(request))


def _start_emulator(client: AdbClient, request: OperationRequest) -> Any:
    client.start_emulator(_require_target(request))
    return None


def _kill_emulator(client: AdbClient, request: OperationRequest) -> Any:
    return client.kill_emulator(_require_target(request))


OPERATION_HANDLERS: dict[OperationKind, Callable[[AdbClient, OperationRequest], Any]] = {
    OperationKind.LIST_DEVICES: _list_devices,
    OperationKind.LIST_AVDS: _list_avds,
    OperationKind.DEVICE_INFO: _device_info,
    OperationKind.SHELL: _shell,
    OperationKind.INSTALL: _install,
    OperationKind.UNINSTALL: _uninstall,
    OperationKind.REBOOT: _reboot,
    OperationKind.DISCONNECT: _disconnect,
    OperationKind.START_EMULATOR: _start_emulator,
    OperationKind.KILL_EMULATOR: _kill_emulator,
}


def perform(client: AdbClient, request: OperationRequest) -> OperationResult:
    """Run one request synchronously and fold every outcome into a result."""
    handler = OPERATION_HANDLERS.get(request.kind)
    if handler is None:
        return OperationResult.failure(request, f"unsupported operation: {request.kind.value}")
    try:
        payload = handler(client, request)
    except BridgeError as exc:
        return OperationResult.failure(request, exc.detail)
    except FileNotFoundError as exc:
        tool = exc.filename or "bridge tool"
        return OperationResult.failure(request, f"{tool} not found; is it installed and in PATH?")
    except subprocess.TimeoutExpired:
        return OperationResult.failure(request, f"{request.describe()} timed out")
    except OSError as exc:
        return OperationResult.failure(request, f"could not launch {request.describe()}: {exc}")
    except Exception as exc:
        logger.exception("operation_crashed", token=request.token, kind=request.kind.value)
        return OperationResult.failure(request, str(exc) or type(exc).__name__)
    return OperationResult.success(request, payload)


class OperationExecutor:
    """One daemon thread per request; results go to `deliver` from that thread.

    Shutdown refuses new requests. Threads already running still finish and
    deliver their result.
    """

    def __init__(self, client: AdbClient, deliver: Deliver) -> None:
        self.client = client
        self._deliver = deliver
        self._lock = threading.Lock()
        self._closed = False
        self._running: set[int] = set()

    @property
    def running(self) -> int:
        with self._lock:
            return len(self._running)

    def _run(self, request: OperationRequest, future: Future) -> None:
        try:
            result = perform(self.client, request)
        except Exception as exc:
            result = OperationResult.failure(request, str(exc) or type(exc).__name__)
        logger.debug(
            "operation_finished",
            token=result.token,
            kind=result.kind.value,
            ok=result.ok,
            error=result.error or None,
        )
        with self._lock:
            self._running.discard(request.token)
        future.set_result(result)
        self._deliver(result)

    def _refuse(self, request: OperationRequest, reason: str) -> Future:
        result = OperationResult.failure(request, f"could not launch {request.describe()}: {reason}")
        future: Future = Future()
        future.set_result(result)
        self._deliver(result)
        return future

    def submit(self, request: OperationRequest) -> Future:
        with self._lock:
            closed = self._closed
            if not closed:
                self._running.add(request.token)
        if closed:
            return self._refuse(request, "executor is shut down")

        future: Future = Future()
        worker = threading.Thread(
            target=self._run,
            args=(request, future),
            name=f"lazyadb-op-{request.token}",
            daemon=True,
        )
        try:
            worker.start()
        except RuntimeError as exc:
            with self._lock:
                self._running.discard(request.token)
            return self._refuse(request, str(exc))
        return future

    def shutdown(self) -> None:
        with self._lock:
            self._closed = True
            running = len(self._running)
        if running:
            logger.debug("executor_shutdown", running=running)

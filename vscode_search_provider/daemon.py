"""D-Bus service runtime with systemd integration.

Connects to the session bus, registers a search provider for every installed
VSCode variant, acquires the well-known bus name and then serves search
requests from a single-threaded GLib loop until SIGTERM or SIGINT.

The runtime is an explicit state machine:

    CONNECTING -> REGISTERING -> ACQUIRING_NAME -> SERVING -> SHUTTING_DOWN -> STOPPED

Any failure before SERVING is fatal and ends in STOPPED with exit status 1.
"""

import logging
import os
import signal
import sys
from enum import Enum
from pathlib import Path
from typing import Any, Callable, List, Optional, Sequence

from gi.repository import GLib, Gio
from pydbus import SessionBus

try:
    from systemd import journal, daemon as sd_daemon
    SYSTEMD_AVAILABLE = True
except ImportError:
    SYSTEMD_AVAILABLE = False

from .activation import ActivatedProvider, AppLookup, activate_providers, find_installed_app
from .errors import (
    BusConnectionError,
    NameAcquisitionError,
    SearchProviderError,
)
from .providers import BUSNAME, PROVIDERS, ProviderDefinition
from .search_provider import SEARCH_PROVIDER_INTERFACE

logger = logging.getLogger(__name__)

TERMINATION_SIGNALS = (signal.SIGTERM, signal.SIGINT)

# Logger pydbus uses for exceptions raised by exported methods
PYDBUS_LOGGER = "pydbus.registration"


class RuntimeState(str, Enum):
    """Lifecycle states of the service runtime."""

    CONNECTING = "connecting"
    REGISTERING = "registering"
    ACQUIRING_NAME = "acquiring_name"
    SERVING = "serving"
    SHUTTING_DOWN = "shutting_down"
    STOPPED = "stopped"


class LoopEvent(str, Enum):
    """Events the serving loop waits for."""

    CONNECTION_READY = "connection_ready"
    TERMINATE_REQUESTED = "terminate_requested"


class GLibEventPump:
    """Blocking wait on the default GLib main context.

    GDBus delivers incoming method calls of registered objects as sources on
    the default main context, so one context iteration dispatches pending
    D-Bus messages. Termination signals are GLib unix signal sources on the
    same context, at higher priority.
    """

    def __init__(self, signals: Sequence[int] = TERMINATION_SIGNALS):
        self.context = GLib.MainContext.default()
        self.signals = tuple(signals)
        self.terminate_signal: Optional[int] = None
        self._source_ids: List[int] = []

    def start(self) -> None:
        """Install handlers for the termination signals."""
        for signum in self.signals:
            source_id = GLib.unix_signal_add(GLib.PRIORITY_HIGH, signum, self._on_signal, signum)
            self._source_ids.append(source_id)

    def _on_signal(self, signum: int) -> bool:
        logger.debug(f"Received signal {signal.Signals(signum).name}, quitting loop")
        self.terminate_signal = signum
        return GLib.SOURCE_REMOVE

    def next_event(self) -> LoopEvent:
        """Block until the next event and dispatch it.

        One iteration dispatches every source that is ready at the highest
        pending priority, so a single CONNECTION_READY may cover several D-Bus
        method calls. They still run one after another on this thread, and a
        pending termination signal outranks them.

        Failing method calls never surface here: pydbus catches the exception,
        logs it on the ``pydbus.registration`` logger and replies with a D-Bus
        error, leaving the object registered.
        """
        self.context.iteration(True)
        if self.terminate_signal is not None:
            return LoopEvent.TERMINATE_REQUESTED
        return LoopEvent.CONNECTION_READY


def notify_systemd(state: str) -> None:
    """Send a state notification (READY=1, STOPPING=1) to systemd."""
    if SYSTEMD_AVAILABLE:
        sd_daemon.notify(state)
        logger.debug(f"Sent {state} to systemd")


class SearchProviderService:
    """The search provider D-Bus service."""

    def __init__(
        self,
        connect: Callable[[], Any] = SessionBus,
        find_app: AppLookup = find_installed_app,
        config_home: Optional[Path] = None,
        providers: Sequence[ProviderDefinition] = PROVIDERS,
        pump: Optional[GLibEventPump] = None,
        bus_name: str = BUSNAME,
    ):
        """
        Initialize the service.

        Args:
            connect: Opens the session bus connection (pydbus bus)
            find_app: Looks up installed applications by desktop ID
            config_home: User configuration root (defaults to XDG config home)
            providers: Provider definitions to activate
            pump: Event source for the serving loop (defaults to GLibEventPump)
            bus_name: Well-known name to acquire
        """
        self.connect = connect
        self.find_app = find_app
        self.config_home = config_home
        self.providers = providers
        self.pump = pump
        self.bus_name = bus_name

        self.state = RuntimeState.CONNECTING
        self.bus: Any = None
        self.activated: List[ActivatedProvider] = []
        self.name_owner: Any = None
        self.stop_signal: Optional[int] = None

    def _transition(self, state: RuntimeState) -> None:
        logger.debug(f"Service state {self.state.value} -> {state.value}")
        self.state = state

    @property
    def object_paths(self) -> List[str]:
        return [provider.definition.objpath for provider in self.activated]

    def start(self) -> None:
        """Connect, register all providers and acquire the bus name.

        Raises:
            BusConnectionError: If the session bus is unreachable
            RegistrationError: If a provider object cannot be registered
            NameAcquisitionError: If the bus name cannot be acquired
        """
        self._transition(RuntimeState.CONNECTING)
        try:
            self.bus = self.connect()
        except Exception as e:
            raise BusConnectionError(str(e)) from e

        self._transition(RuntimeState.REGISTERING)
        self.activated = activate_providers(
            self.bus,
            providers=self.providers,
            config_home=self.config_home,
            find_app=self.find_app,
        )
        self._watch_unhandled_messages()

        self._transition(RuntimeState.ACQUIRING_NAME)
        logger.info(f"All providers registered, acquiring {self.bus_name}")
        try:
            self.name_owner = self.bus.request_name(self.bus_name, allow_replacement=False)
        except Exception as e:
            raise NameAcquisitionError(self.bus_name, str(e)) from e
        logger.info(f"Acquired name {self.bus_name}, handling DBus events")

    def _watch_unhandled_messages(self) -> None:
        connection = getattr(self.bus, "con", None)
        if isinstance(connection, Gio.DBusConnection):
            connection.add_filter(self._log_unhandled_message)

    def _log_unhandled_message(
        self, connection: Gio.DBusConnection, message: Gio.DBusMessage, incoming: bool
    ) -> Gio.DBusMessage:
        if (
            incoming
            and message.get_message_type() == Gio.DBusMessageType.METHOD_CALL
            and message.get_interface() == SEARCH_PROVIDER_INTERFACE
            and message.get_path() not in self.object_paths
        ):
            logger.warning(
                f"Message not handled by any provider: {message.get_member()} on {message.get_path()}"
            )
        return message

    def serve(self) -> None:
        """Dispatch D-Bus messages until a termination signal arrives."""
        if self.pump is None:
            self.pump = GLibEventPump()
        self.pump.start()
        self._transition(RuntimeState.SERVING)
        notify_systemd("READY=1")

        while self.state is RuntimeState.SERVING:
            event = self.pump.next_event()
            if event is LoopEvent.TERMINATE_REQUESTED:
                self.request_shutdown(self.pump.terminate_signal)
            else:
                logger.debug("Interface message processed")

        self._transition(RuntimeState.STOPPED)

    def request_shutdown(self, signum: Optional[int] = None) -> None:
        """Stop serving immediately; pending messages are not drained."""
        if signum is not None:
            logger.info(f"Received {signal.Signals(signum).name}, shutting down")
        self.stop_signal = signum
        self._transition(RuntimeState.SHUTTING_DOWN)
        notify_systemd("STOPPING=1")

    def run(self) -> int:
        """Run the service.

        Returns:
            Exit code (0 = stopped by signal, 1 = fatal startup error)
        """
        try:
            self.start()
        except SearchProviderError as e:
            logger.error(f"Failed to start DBus event loop: {e}")
            self._transition(RuntimeState.STOPPED)
            return 1

        self.serve()
        logger.info("Service stopped")
        return 0


def setup_logging() -> None:
    """Setup logging to systemd journal or stderr."""
    log_level = os.environ.get("LOG_LEVEL", "INFO").upper()

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    if SYSTEMD_AVAILABLE:
        handler = journal.JournalHandler(SYSLOG_IDENTIFIER="vscode-search-provider")
    else:
        handler = logging.StreamHandler(sys.stderr)

    formatter = logging.Formatter(
        "%(levelname)s [%(name)s] %(message)s"
    )
    handler.setFormatter(formatter)
    root_logger.addHandler(handler)

    # pydbus reports failed method calls on its own logger
    logging.getLogger(PYDBUS_LOGGER).setLevel(log_level)

    logger.debug(f"Logging configured: level={log_level}")

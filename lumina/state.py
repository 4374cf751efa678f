from dataclasses import dataclass

from nicegui import binding

from lumina.constants import STATUS_STOPPED


# Shared state singleton for cross-page bindings
@binding.bindable_dataclass
class ServicesState:
    status: str = STATUS_STOPPED  # last result of get_service_status
    last_message: str = ""  # last command result relayed to the UI
    base_path: str = ""


services_state = ServicesState()


@dataclass
class ServiceRow:
    label: str
    port: int
    pid: int | None = None
    alive: bool = False

    @property
    def summary(self) -> str:
        if self.alive:
            return f"{self.label}: running (PID {self.pid}, port {self.port})"
        return f"{self.label}: not running (port {self.port})"

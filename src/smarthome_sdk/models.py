"""
Records exchanged with the Smarthome server.

The server speaks camelCase JSON; all records accept both the wire names and
the Python attribute names, and are immutable once decoded.
"""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class SmarthomeModel(BaseModel):
    """Base for all records: camelCase aliases, frozen instances."""

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, frozen=True
    )


class VersionInfo(SmarthomeModel):
    """Version information reported by `GET /api/version`."""

    version: str
    go_version: str = ""


class RoomData(SmarthomeModel):
    id: str
    name: str
    description: str


class Switch(SmarthomeModel):
    id: str
    name: str
    room_id: str
    power_on: bool
    watts: int


class Camera(SmarthomeModel):
    id: str
    name: str
    url: str
    room_id: str


class Room(SmarthomeModel):
    """A room together with the switches and cameras it contains."""

    data: RoomData
    switches: list[Switch] = Field(default_factory=list)
    cameras: list[Camera] = Field(default_factory=list)


class PowerDrawData(SmarthomeModel):
    switch_count: int
    watts: int
    percent: float


class PowerDrawPoint(SmarthomeModel):
    """Power draw of all switches at one point in time (unix millis)."""

    id: int
    time: int
    on: PowerDrawData
    off: PowerDrawData


class PowerRequest(SmarthomeModel):
    switch: str
    power_on: bool


class DatabaseStats(SmarthomeModel):
    open_connections: int
    in_use: int = Field(alias="InUse")
    idle: int = Field(alias="Idle")


class PowerJob(SmarthomeModel):
    id: int
    switch_name: str
    power: bool


class JobResult(SmarthomeModel):
    id: int
    error: str


class HardwareNode(SmarthomeModel):
    name: str
    online: bool
    enabled: bool
    url: str
    token: str = Field(repr=False)


class ServerTime(SmarthomeModel):
    hours: int
    minutes: int
    seconds: int
    unix: int


class DebugInfo(SmarthomeModel):
    """Runtime diagnostics reported by `GET /api/debug`."""

    server_version: str = Field(alias="version")
    go_version: str
    cpu_cores: int
    goroutines: int
    memory_usage: int
    database_online: bool
    database_stats: DatabaseStats
    power_job_count: int
    power_job_with_error_count: int = Field(alias="lastPowerJobErrorCount")
    power_jobs: list[PowerJob] = Field(default_factory=list)
    power_job_results: list[JobResult] = Field(default_factory=list)
    hardware_nodes_count: int
    hardware_nodes_online: int
    hardware_nodes_enabled: int
    hardware_nodes: list[HardwareNode] = Field(default_factory=list)
    homescript_job_count: int
    time: ServerTime


class HomescriptData(SmarthomeModel):
    """A stored Homescript as created via `POST /api/homescript/add`."""

    id: str
    name: str
    description: str = ""
    quick_actions_enabled: bool = False
    scheduler_enabled: bool = False
    code: str = ""
    md_icon: str = ""
    workspace: str = ""


class DeleteHomescriptRequest(SmarthomeModel):
    id: str

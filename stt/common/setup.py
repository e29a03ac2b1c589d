import os
import sys
from pathlib import Path
from dataclasses import dataclass

APP_NAME = "SimpleTimeTracker"
DATABASE_NAME = "simple_time_tracker.sqlite"

# Lil helper function to create missing directories and hand the path straight back.
def ensure_directory(path: Path):
    path.mkdir(parents=True,exist_ok=True)
    return path

# Picks the per-user data folder. STT_DATA_DIR always wins, otherwise APPDATA on Windows and the XDG data
# home everywhere else.
def user_data_dir() -> Path:
    override = os.getenv("STT_DATA_DIR")
    if override:
        return Path(override)
    if sys.platform.startswith("win"):
        appdata = os.getenv("APPDATA")
        if not appdata:
            raise RuntimeError("Missing APPDATA environment variable, cannot determine data directories.")
        return Path(appdata) / APP_NAME
    base = os.getenv("XDG_DATA_HOME") or (Path.home() / ".local" / "share")
    return Path(base) / APP_NAME

# Dataclass for accessing paths across program.
@dataclass(frozen=False)
class ProjectPaths:

    data: Path
    logs: Path
    database: Path

    @staticmethod
    def build():
        data = ensure_directory(user_data_dir())
        logs = ensure_directory(data / "logs")

        return ProjectPaths(
            data = data,
            logs = logs,
            database = data / DATABASE_NAME,
        )
PATHS = ProjectPaths.build()

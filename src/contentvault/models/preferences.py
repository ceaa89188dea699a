from dataclasses import dataclass
from enum import Enum


class Layout(str, Enum):
    GRID = "grid"
    LIST = "list"


@dataclass(frozen=True)
class Preferences:
    dark_mode: bool = True
    layout: Layout = Layout.GRID

# careerlog/savefile.py
"""Read and write career log state stored in a host save file."""
from __future__ import annotations

from pathlib import Path
from typing import Optional, Tuple

from .career_log import CareerLog
from .config_node import ConfigNode
from .host import HostServices
from .settings import CareerLogSettings

SCENARIO_NODE = "SCENARIO"
SCENARIO_NAME = "CareerLog"


def find_scenario(root: ConfigNode) -> ConfigNode:
    """
    Locate ``SCENARIO { name = CareerLog ... }`` anywhere in the tree; a file
    holding only the career log state is its own scenario node.
    """
    for node in root.walk():
        if node.name == SCENARIO_NODE and node.get_value("name") == SCENARIO_NAME:
            return node
    return root


def read_save_file(path: str | Path) -> Tuple[ConfigNode, ConfigNode]:
    """Return ``(document_root, career_log_node)``."""
    root = ConfigNode.parse(Path(path).read_text(encoding="utf-8"))
    return root, find_scenario(root)


def load_save_file(
    path: str | Path,
    settings: Optional[CareerLogSettings] = None,
    host: Optional[HostServices] = None,
) -> CareerLog:
    _, node = read_save_file(path)
    career_log = CareerLog(host=host, settings=settings)
    career_log.load(node)
    return career_log


def write_save_file(career_log: CareerLog, path: str | Path) -> Path:
    """Write a standalone save holding only the career log scenario."""
    root = ConfigNode()
    scenario = root.add_node(SCENARIO_NODE)
    scenario.add_value("name", SCENARIO_NAME)
    career_log.save(scenario)
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    p.write_text(root.to_text(), encoding="utf-8")
    return p

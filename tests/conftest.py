"""Shared fixtures: headless engines on a virtual clock and small folder forests."""

import pytest

from engine import EventRecorder, LayoutEngine, ManualScheduler
from layout.config import LayoutConfig


def folder(node_id, *children, expanded=True, position=None):
    spec = {"id": node_id, "path": f"/{node_id}", "name": node_id, "expanded": expanded, "children": list(children)}
    if position is not None:
        spec["position"] = position
    return spec


@pytest.fixture
def scheduler():
    return ManualScheduler()


@pytest.fixture
def scenario_config():
    return LayoutConfig(sibling_sep=80, rank_sep=60)


@pytest.fixture
def scenario_forest():
    """R -> [A, B], A -> [C], everything expanded."""
    return [folder("R", folder("A", folder("C", expanded=False)), folder("B", expanded=False))]


@pytest.fixture
def engine(scheduler, scenario_config):
    e = LayoutEngine(config=scenario_config, scheduler=scheduler)
    yield e
    e.close()


@pytest.fixture
def recorder(engine):
    r = EventRecorder(engine.events)
    yield r
    r.close()


def positions_of(engine, ids=None):
    ids = ids if ids is not None else engine.model.all_ids()
    return {nid: engine.model.get(nid).position for nid in ids}

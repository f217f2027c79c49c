from __future__ import annotations

import json

import matplotlib.pyplot as plt

from route_sim.core.config import EngineConfig
from route_sim.core.enums import RetentionAnchor
from route_sim.core.simulator import NetworkSimulator
from route_sim.utils.metrics import check_conservation, format_metrics, save_metrics_to_json
from route_sim.utils.visualization import (
    SNAPSHOT_FIGURE,
    build_graph,
    save_network_visualization,
)


def test_save_metrics_to_json(tmp_path, simulator: NetworkSimulator) -> None:
    simulator.update_routing_table("R1", "H2", "")
    simulator.send_packet("H1", "H2")
    metrics = simulator.run(52 * 50.0 + 1)

    filename = tmp_path / "results" / "metrics.json"
    save_metrics_to_json(metrics, str(filename))

    saved = json.loads(filename.read_text())
    assert saved["sent"] == 1
    assert saved["dropped"] == 1
    assert saved["packet_drops"] == {"R1": 1}
    assert saved["drop_reasons"] == {"no-route": 1}


def test_conservation_holds_with_traffic(simulator: NetworkSimulator) -> None:
    for _ in range(3):
        simulator.send_packet("H1", "H2")
    simulator.send_packet("H2", "H1")
    for _ in range(200):
        simulator.step(simulator.now)
        assert check_conservation(simulator)


def test_format_metrics(simulator: NetworkSimulator) -> None:
    simulator.send_packet("H2", "H1")
    lines = format_metrics(simulator.run(51.0))
    assert "Sent:           1" in lines
    assert "Drops (no-route): 1" in lines


def test_build_graph_skips_dangling_links(simulator: NetworkSimulator) -> None:
    simulator.remove_node("R2")
    graph = build_graph(simulator.state)
    assert set(graph.nodes) == {"R1", "H1", "H2"}
    assert list(graph.edges) == [("R1", "H1")]
    assert graph.nodes["H1"]["pos"] == (100.0, 100.0)


def test_save_network_visualization(tmp_path) -> None:
    sim = NetworkSimulator(config=EngineConfig(RETENTION_ANCHOR=RetentionAnchor.TERMINATION))
    sim.update_routing_table("H1", "H2", "R1")
    sim.send_packet("H1", "H2")
    sim.send_packet("H2", "H1")
    sim.run(501.0)

    filename = tmp_path / "snapshot.png"
    save_network_visualization(sim, filename=str(filename))
    assert filename.exists()
    assert filename.stat().st_size > 0


def test_shown_snapshot_closes_its_figure(monkeypatch, simulator: NetworkSimulator) -> None:
    plt.close("all")
    monkeypatch.setattr(plt, "show", lambda block=True: None)
    save_network_visualization(simulator, block=True)
    save_network_visualization(simulator, block=True)
    assert plt.get_fignums() == []


def test_live_snapshot_reuses_one_figure(monkeypatch, simulator: NetworkSimulator) -> None:
    plt.close("all")
    monkeypatch.setattr(plt, "show", lambda block=True: None)
    monkeypatch.setattr(plt, "pause", lambda interval: None)
    save_network_visualization(simulator, block=False)
    save_network_visualization(simulator, block=False)
    assert plt.get_figlabels() == [SNAPSHOT_FIGURE]
    plt.close("all")

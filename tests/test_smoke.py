"""Smoke test to verify the toolchain works."""


def test_import_corridor_sim():
    """Verify the corridor_sim package can be imported."""
    import corridor_sim

    assert corridor_sim.__version__ == "0.1.0"


def test_subpackages_importable():
    """Verify all subpackages can be imported."""
    import corridor_sim.live.feed
    import corridor_sim.overlay.synchronizer
    import corridor_sim.schedule
    import corridor_sim.simulation.context
    import corridor_sim.viewport.controller
    import corridor_sim.web.app

    assert corridor_sim.schedule is not None
    assert corridor_sim.simulation.context is not None
    assert corridor_sim.overlay.synchronizer is not None
    assert corridor_sim.live.feed is not None
    assert corridor_sim.viewport.controller is not None
    assert corridor_sim.web.app is not None

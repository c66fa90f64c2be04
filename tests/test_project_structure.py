"""Basic project scaffolding tests."""

import importlib


def test_package_importable() -> None:
    """Verify the top-level package is importable."""
    import battlegrid  # noqa: F401  (import used to ensure availability)

    assert battlegrid is not None


def test_submodules_exist() -> None:
    modules = [
        "battlegrid.cli",
        "battlegrid.engine.board",
        "battlegrid.engine.config",
        "battlegrid.engine.errors",
        "battlegrid.engine.game",
        "battlegrid.engine.instrumented_game",
        "battlegrid.engine.ship",
        "battlegrid.telemetry",
    ]

    for module in modules:
        assert importlib.import_module(module) is not None

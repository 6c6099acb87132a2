from __future__ import annotations

from datetime import UTC, datetime, timedelta
from pathlib import Path
from typing import Callable

import pytest

from tests._fixtures.project_builder import ProjectBuilder


@pytest.fixture
def project_builder(tmp_path: Path) -> ProjectBuilder:
    """Provide a reusable project builder rooted at the pytest tmp_path."""
    return ProjectBuilder(tmp_path)


@pytest.fixture
def clock() -> Callable[[], datetime]:
    """Deterministic clock advancing one minute per call."""
    state = {"now": datetime(2024, 5, 1, 10, 0, 0, tzinfo=UTC)}

    def _tick() -> datetime:
        current = state["now"]
        state["now"] = current + timedelta(minutes=1)
        return current

    return _tick


@pytest.fixture
def sample_project(project_builder: ProjectBuilder) -> ProjectBuilder:
    """Two packages (three targets) and one legacy folder."""
    project_builder.write(
        {
            "Packages/Core/Sources/CoreImpl/Core.swift": """
                func load() async throws {}
            """,
            "Packages/Core/Sources/CoreAPI/API.swift": """
                func fetch(completion: () -> Void) {}
            """,
            "Packages/Networking/Sources/Networking/Client.swift": """
                func send() async {}
            """,
            "Legacy/Checkout/CheckoutView.swift": """
                import UIKit
                final class CheckoutView: UIView {}
            """,
        }
    )
    return project_builder

"""Shared fixtures for the NeuroGraph test suite."""

import random

import pytest

from neurograph import Diagram, DiagramStore, InteractionController, Node, NodeKind, starter_diagram


@pytest.fixture
def sample_diagram() -> Diagram:
    """Input -> Conv -> MaxPool chain (nodes "1", "2", "3"; edges "e1", "e2")."""
    return starter_diagram()


@pytest.fixture
def store(sample_diagram) -> DiagramStore:
    return DiagramStore(sample_diagram)


@pytest.fixture
def controller(store) -> InteractionController:
    # Seeded so add_node placement jitter is reproducible
    return InteractionController(store=store, rng=random.Random(0))


@pytest.fixture
def single_node() -> Node:
    return Node(id="a", kind=NodeKind.LAYER, label="A", x=100, y=100, width=140, height=60)

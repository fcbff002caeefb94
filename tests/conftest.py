import itertools
import xml.etree.ElementTree as ET

import pytest

from treecanvas.diagram_components import (
    DiagramConfig,
    FrameLoop,
    RecordingSurface,
    RenderScheduler,
    TreeBuilder,
    TreeState,
)

USER_DOCUMENT = "<user><name>John</name><age>30</age></user>"


def counting_ids(prefix="n"):
    counter = itertools.count()
    return lambda: f"{prefix}{next(counter)}"


def chain(depth):
    """A single path of ``depth`` nested elements."""
    root = ET.Element("level0")
    current = root
    for level in range(1, depth):
        current = ET.SubElement(current, f"level{level}")
    return root


def fan(children, tag="item"):
    root = ET.Element("root")
    for index in range(children):
        ET.SubElement(root, tag, {"index": str(index)})
    return root


def build(elements, config=None):
    builder = TreeBuilder(config, id_factory=counting_ids())
    roots = builder.build(elements)
    return builder, roots


def tree_state(elements, config=None):
    builder, roots = build(elements, config)
    return TreeState(roots, builder.index, builder.total_count)


def by_label(roots, label):
    for root in roots:
        for node in root.iter_subtree():
            if node.label == label:
                return node
    raise KeyError(label)


@pytest.fixture
def user_element():
    return ET.fromstring(USER_DOCUMENT)


@pytest.fixture
def frames():
    return FrameLoop()


@pytest.fixture
def surface():
    return RecordingSurface()


@pytest.fixture
def make_scheduler(surface, frames):
    def factory(elements, config=None):
        config = config or DiagramConfig()
        scheduler = RenderScheduler(surface, config=config, frames=frames)
        scheduler.attach(tree_state(elements, config))
        return scheduler

    return factory

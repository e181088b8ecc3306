import pytest
import sys
from pathlib import Path

# Add src to sys.path so we can import icon_toolkit
SRC_PATH = Path(__file__).resolve().parent.parent / "src"
if SRC_PATH.as_posix() not in sys.path:
    sys.path.insert(0, SRC_PATH.as_posix())

from icon_toolkit.core.models import Candidate, CandidateStatus, NodeKind  # noqa: E402
from icon_toolkit.document.memory import InMemoryDocument  # noqa: E402


# Common test fixtures
@pytest.fixture
def document() -> InMemoryDocument:
    """Empty document with a single page named "Page 1"."""
    doc = InMemoryDocument("Design System")
    doc.add_page("Page 1")
    return doc


@pytest.fixture
def page_id(document: InMemoryDocument) -> str:
    return document.pages()[0].id


@pytest.fixture
def duplicate_icons_document() -> InMemoryDocument:
    """Page with three differently named copies of the same 24x24 home icon."""
    doc = InMemoryDocument("Design System")
    page = doc.add_page("Page 1")
    doc.add_node(page, "home-icon", NodeKind.VECTOR, width=24, height=24, x=0, y=0)
    doc.add_node(page, "home_icon2", NodeKind.VECTOR, width=24, height=24, x=40, y=0)
    doc.add_node(page, "HomeIcon", NodeKind.VECTOR, width=24, height=24, x=80, y=0)
    return doc


@pytest.fixture
def mixed_document() -> InMemoryDocument:
    """
    Master, instance and unresolved icon on one page, plus an archive page.

    Ids are fixed so tests can refer to them directly.
    """
    doc = InMemoryDocument("Design System")
    page = doc.add_page("Page 1", node_id="0:1")
    doc.add_node(page, "icon/home", NodeKind.COMPONENT, width=24, height=24, node_id="1:10")
    doc.add_node("1:10", "Path", NodeKind.VECTOR, width=20, height=20, x=2, y=2, node_id="1:11")
    doc.add_node(page, "icon/home", NodeKind.INSTANCE, width=24, height=24, x=100,
                 main_component_id="1:10", node_id="1:20")
    doc.add_node(page, "star-icon", NodeKind.VECTOR, width=24, height=24, x=200, node_id="1:30")
    archive = doc.add_page("Archive", node_id="0:2")
    doc.add_node(archive, "old-icon", NodeKind.VECTOR, width=24, height=24, node_id="1:40")
    return doc


@pytest.fixture
def make_candidate():
    """Factory for Candidate values with sensible defaults."""
    def _make(
        node_id: str,
        name: str,
        width: int = 24,
        height: int = 24,
        page: str = "Page 1",
        kind: NodeKind = NodeKind.VECTOR,
        status: CandidateStatus = CandidateStatus.UNRESOLVED,
        source: str = "Icon Library",
        **extra,
    ) -> Candidate:
        return Candidate(
            node_id=node_id,
            name=name,
            kind=kind,
            width=width,
            height=height,
            page=page,
            source=source,
            status=status,
            **extra,
        )
    return _make

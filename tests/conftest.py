import pytest

from agents.copywriter_agent import CopywriterAgent
from agents.creative_agent import CreativeAgent
from agents.creative_director_agent import CreativeDirector
from library.storage import GalleryStore

from fakes import FakeClient


@pytest.fixture
def fake_client():
    return FakeClient()


@pytest.fixture
def store(tmp_path):
    return GalleryStore(str(tmp_path / "data"))


@pytest.fixture
def director(fake_client, store):
    return CreativeDirector(
        creative_agent=CreativeAgent(fake_client),
        copywriter_agent=CopywriterAgent(fake_client),
        store=store,
        countdown_interval=0.01,
    )

import pytest

from forgemotion.engine.dispatcher import AnimationDispatcher
from forgemotion.engine.frame_scheduler import FrameScheduler
from forgemotion.engine.motion_engine import MotionEngine
from forgemotion.engine.node_registry import NodeRegistry
from forgemotion.managers.config_manager import ConfigManager
from forgemotion.models.config import EngineConfig
from forgemotion.models.enums import LogLevel
from forgemotion.models.node import AnimatableNode, NodeParams, Rect
from forgemotion.services.event_bus import EventBus
from forgemotion.services.motion_preference import MotionPreferenceGate
from forgemotion.utils.logger import configure_logger


@pytest.fixture(autouse=True)
def quiet_logger():
    """Keep test output readable; only warnings and errors are printed"""
    configure_logger(LogLevel.WARN, use_colors=False)
    yield
    configure_logger(LogLevel.INFO, use_colors=True)


@pytest.fixture
def scheduler():
    """Scheduler on a frozen clock: time only moves through tick()/advance()"""
    return FrameScheduler(fps=60, clock=lambda: 0.0)


@pytest.fixture
def event_bus():
    return EventBus()


@pytest.fixture
def gate(event_bus):
    return MotionPreferenceGate(reduced=False, event_bus=event_bus)


@pytest.fixture
def config():
    return EngineConfig()


@pytest.fixture
def registry():
    return NodeRegistry()


@pytest.fixture
def dispatcher(scheduler, gate, registry, config, event_bus):
    return AnimationDispatcher(scheduler, gate, registry, config, event_bus=event_bus)


@pytest.fixture
def factory_config():
    return ConfigManager().load()


@pytest.fixture
def engine(factory_config):
    return MotionEngine(config=factory_config, clock=lambda: 0.0)


@pytest.fixture
def make_node():
    """
    Build nodes tersely:

        make_node("hero", "animate-on-scroll")
        make_node("stat", "counter-animate", target=1000, format=CounterFormat.CURRENCY)
        make_node("btn", "magnetic", box=Rect(0, 0, 100, 40))
    """
    def build(node_id, *classes, text="", box=None, content=None, **params):
        return AnimatableNode(
            node_id=node_id,
            classes=frozenset(classes),
            params=NodeParams(**params),
            text=text,
            box=box or Rect(),
            content=content,
        )

    return build

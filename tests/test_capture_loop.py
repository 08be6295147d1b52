import asyncio
from types import SimpleNamespace

import pytest
import pytest_asyncio

from soundscape.capture_loop import CaptureLoop, RateEstimator
from soundscape.config import DEFAULT_NARRATION, VISION_OFFLINE_PHRASE
from soundscape.errors import HardwareNotReady, VisionFailed, VisionUnconfigured
from soundscape.models import AssistantMode, CaptureState, Haptic
from soundscape.permissions import PermissionProvider

from conftest import FakeAnalyzer, FakeCamera, FakePermissions, make_scene


@pytest_asyncio.fixture
async def make_loop(camera, speech, haptics, permissions, gate, clock):
    loops = []

    def _make(analyzer=None, **overrides):
        kwargs = dict(
            camera=camera,
            analyzer=analyzer or FakeAnalyzer(make_scene(curb_ahead=True)),
            speech=speech,
            haptics=haptics,
            permissions=permissions,
            mode=AssistantMode(capture_interval_ms=3000),
            gate=gate,
            clock=clock,
        )
        kwargs.update(overrides)
        loop = CaptureLoop(**kwargs)
        loops.append(loop)
        return loop

    yield _make
    for loop in loops:
        loop.stop()
        await loop.drain()


async def run_tick(loop):
    task = loop.tick()
    assert task is not None
    await task
    await loop.drain()


def test_rate_estimator_reports_and_resets(clock):
    rate = RateEstimator(clock)
    results = []
    for _ in range(4):
        clock.advance(250)
        results.append(rate.record())

    assert results[:3] == [None, None, None]
    assert results[3] == pytest.approx(4.0)
    assert rate.count == 0
    assert rate.window_start == clock.now_ms()


def test_rate_estimator_uses_actual_elapsed(clock):
    rate = RateEstimator(clock)
    clock.advance(500)
    assert rate.record() is None
    clock.advance(1500)
    assert rate.record() == pytest.approx(1.0)
    assert rate.rate == pytest.approx(1.0)


@pytest.mark.asyncio
async def test_cycle_speaks_and_pulses(make_loop, speech, haptics):
    loop = make_loop(FakeAnalyzer(make_scene(obstacle_close=True)))
    loop.start()
    await run_tick(loop)

    assert speech.said == ["Obstacle close. Stop."]
    assert haptics.pulses == [Haptic.LONG]
    assert loop.last_guidance.text == "Obstacle close. Stop."
    assert loop.status.state == CaptureState.READY
    assert loop.status.message == "Obstacle close. Stop."


@pytest.mark.asyncio
async def test_no_cue_for_empty_scene(make_loop, speech, haptics):
    loop = make_loop(FakeAnalyzer(make_scene()))
    loop.start()
    await run_tick(loop)

    assert speech.said == []
    assert haptics.pulses == []
    assert loop.last_guidance is None
    assert loop.state == CaptureState.READY


@pytest.mark.asyncio
async def test_no_concurrent_analysis(make_loop, release):
    analyzer = FakeAnalyzer(make_scene(curb_ahead=True), wait_for=release)
    loop = make_loop(analyzer)
    loop.start()

    first = loop.tick()
    await asyncio.sleep(0)
    assert loop.state == CaptureState.ANALYZING
    assert loop.tick() is None
    assert loop.tick() is None

    release.set()
    await first
    assert analyzer.calls == 1
    assert loop.ticks_started == 1
    assert loop.ticks_skipped == 2

    await run_tick(loop)
    assert analyzer.calls == loop.ticks_started == 2


@pytest.mark.asyncio
async def test_gated_cue_does_not_update_last_guidance(make_loop, gate, clock, speech):
    loop = make_loop(FakeAnalyzer(make_scene(curb_ahead=True)))
    loop.start()
    gate.mark_speech_time()

    await run_tick(loop)
    assert speech.said == []
    assert loop.last_guidance is None
    assert loop.state == CaptureState.READY

    # Same hazard retried every cycle until the channel opens
    clock.advance(2500)
    await run_tick(loop)
    assert speech.said == ["Curb in two steps."]
    assert loop.last_guidance.text == "Curb in two steps."


@pytest.mark.asyncio
async def test_repeat_is_debounced_then_allowed(make_loop, clock, speech):
    loop = make_loop(FakeAnalyzer(make_scene(curb_ahead=True)))
    loop.start()

    await run_tick(loop)
    clock.advance(1200)
    await run_tick(loop)
    assert speech.said == ["Curb in two steps."]

    clock.advance(1300)
    await run_tick(loop)
    assert speech.said == ["Curb in two steps."] * 2


@pytest.mark.asyncio
async def test_higher_priority_hazard_preempts(make_loop, clock, speech):
    analyzer = FakeAnalyzer(make_scene(curb_ahead=True))
    loop = make_loop(analyzer)
    loop.start()
    await run_tick(loop)

    analyzer.scene = make_scene(curb_ahead=True, obstacle_close=True)
    clock.advance(2500)
    await run_tick(loop)
    assert speech.said == ["Curb in two steps.", "Obstacle close. Stop."]


@pytest.mark.asyncio
async def test_error_announces_once_per_window(make_loop, clock, speech):
    analyzer = FakeAnalyzer(error=VisionFailed("boom"))
    loop = make_loop(analyzer)
    loop.start()

    await run_tick(loop)
    assert loop.state == CaptureState.ERROR
    assert loop.last_message == VISION_OFFLINE_PHRASE
    assert speech.said == [VISION_OFFLINE_PHRASE]

    clock.advance(3000)
    await run_tick(loop)
    assert speech.said == [VISION_OFFLINE_PHRASE]

    clock.advance(2000)
    await run_tick(loop)
    assert speech.said == [VISION_OFFLINE_PHRASE] * 2


@pytest.mark.asyncio
async def test_loop_recovers_after_error(make_loop, speech):
    analyzer = FakeAnalyzer(make_scene(obstacle_close=True), error=VisionFailed("boom"))
    loop = make_loop(analyzer)
    loop.start()
    await run_tick(loop)
    assert loop.state == CaptureState.ERROR

    analyzer.error = None
    loop.gate.reset_speech_time()
    await run_tick(loop)
    assert loop.state == CaptureState.READY
    assert speech.said[-1] == "Obstacle close. Stop."


@pytest.mark.asyncio
async def test_camera_failure_goes_to_error(make_loop, speech):
    loop = make_loop(camera=FakeCamera(ready=False))
    loop.start()
    await run_tick(loop)
    assert loop.state == CaptureState.ERROR
    assert speech.said == [VISION_OFFLINE_PHRASE]


@pytest.mark.asyncio
async def test_missing_permission_keeps_loop_offline(make_loop):
    analyzer = FakeAnalyzer()
    loop = make_loop(analyzer, permissions=FakePermissions(camera=False))
    loop.start()
    assert loop.tick() is None
    assert loop.state == CaptureState.OFFLINE
    assert analyzer.calls == 0


@pytest.mark.asyncio
async def test_stop_skips_future_ticks(make_loop):
    analyzer = FakeAnalyzer()
    loop = make_loop(analyzer)
    loop.start()
    await run_tick(loop)
    loop.stop()

    assert loop.tick() is None
    assert loop.status.state == CaptureState.OFFLINE
    assert loop.status.rate is None
    assert analyzer.calls == 1


@pytest.mark.asyncio
async def test_rate_recorded_per_completed_cycle(make_loop, clock):
    loop = make_loop()
    loop.start()
    for _ in range(3):
        clock.advance(500)
        await run_tick(loop)
    assert loop.status.rate == pytest.approx(2.0)
    assert loop.rate_estimator.count == 1


@pytest.mark.asyncio
async def test_ticker_fires_on_interval(make_loop):
    analyzer = FakeAnalyzer()
    # Below the settings floor so the test stays fast
    loop = make_loop(analyzer, mode=SimpleNamespace(capture_interval_ms=10, safe_mode=False, voice_id="v"))
    loop.start()
    await asyncio.sleep(0.1)
    loop.stop()
    await loop.drain()
    assert analyzer.calls >= 2


@pytest.mark.asyncio
async def test_describe_returns_narration(make_loop, speech, gate):
    analyzer = FakeAnalyzer(make_scene(narration="  A quiet street with a crosswalk.  "))
    loop = make_loop(analyzer)
    gate.mark_speech_time()

    assert await loop.capture_and_describe() == "A quiet street with a crosswalk."
    assert loop.last_guidance is None
    assert speech.said == []
    assert not gate.can_speak()


@pytest.mark.asyncio
async def test_describe_falls_back_to_default(make_loop):
    loop = make_loop(FakeAnalyzer(make_scene(narration="")))
    assert await loop.capture_and_describe() == DEFAULT_NARRATION


@pytest.mark.asyncio
async def test_describe_refuses_when_unconfigured(make_loop):
    loop = make_loop(FakeAnalyzer(configured=False))
    with pytest.raises(VisionUnconfigured):
        await loop.capture_and_describe()


@pytest.mark.asyncio
async def test_describe_refuses_when_camera_not_ready(make_loop):
    analyzer = FakeAnalyzer()
    loop = make_loop(analyzer, camera=FakeCamera(ready=False))
    with pytest.raises(HardwareNotReady):
        await loop.capture_and_describe()
    assert analyzer.calls == 0


@pytest.mark.asyncio
async def test_denied_camera_rechecked_in_background(make_loop):
    answers = [False, True]
    opened = []

    class ClosedCamera(FakeCamera):
        def open(self):
            opened.append(True)
            self.ready = True

    permissions = PermissionProvider(
        camera_probe=lambda: answers.pop(0),
        microphone_probe=lambda: True,
        location_probe=lambda: True,
    )
    camera = ClosedCamera(ready=False)
    loop = make_loop(camera=camera, permissions=permissions)
    loop.start()

    assert loop.tick() is None
    await loop.drain()
    assert answers == [True]
    assert opened == []

    assert loop.tick() is None
    await loop.drain()
    assert answers == []
    assert opened == [True]

    await run_tick(loop)
    assert loop.state == CaptureState.READY
    assert camera.captures == 1


@pytest.mark.asyncio
async def test_restart_reports_offline_until_first_tick(make_loop, release):
    analyzer = FakeAnalyzer(make_scene(curb_ahead=True), wait_for=release)
    loop = make_loop(analyzer)
    loop.start()
    cycle = loop.tick()
    loop.stop()
    release.set()
    await cycle

    assert loop.state == CaptureState.OFFLINE
    loop.start()
    assert loop.status.state == CaptureState.OFFLINE

"""Tests for the mission event queue."""
from ascent_sim.events import EventQueue, EventType, MissionEvent


def test_emit_and_drain_in_order():
    q = EventQueue()
    q.emit(EventType.ENGINE_IGNITION, 0.0, 'Liftoff')
    q.emit(EventType.PITCH_KICK, 10.0, 'Gravity turn kick')
    assert len(q) == 2
    events = q.drain()
    assert [e.type for e in events] == [EventType.ENGINE_IGNITION, EventType.PITCH_KICK]
    assert len(q) == 0
    assert q.drain() == []


def test_emit_carries_data():
    q = EventQueue()
    event = q.emit(EventType.STAGE_SEPARATION, 150.0, 'Stage separation', stage=0)
    assert event.data == {'stage': 0}
    assert event.time == 150.0


def test_emit_once():
    q = EventQueue()
    assert q.emit_once('max_q', EventType.MAX_Q_EXCEEDED, 60.0) is True
    assert q.emit_once('max_q', EventType.MAX_Q_EXCEEDED, 61.0) is False
    assert q.has_fired('max_q')
    assert len(q.drain()) == 1


def test_clear_forgets_history():
    q = EventQueue()
    q.emit_once('karman_line', EventType.KARMAN_LINE, 200.0)
    q.clear()
    assert len(q) == 0
    assert not q.has_fired('karman_line')


def test_event_str():
    text = str(MissionEvent(EventType.ENGINE_CUTOFF, 125.5, 'MECO'))
    assert text == "T+02:05.50 ENGINE_CUTOFF: MECO"

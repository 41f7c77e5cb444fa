from guessroom.services.games import BackgroundScheduler


class FakeSocketIO:
    def __init__(self):
        self.tasks = []
        self.slept = []
        self.on_sleep = None

    def start_background_task(self, target, *args):
        self.tasks.append((target, args))

    def sleep(self, seconds):
        self.slept.append(seconds)
        if self.on_sleep:
            self.on_sleep(len(self.slept))

    def run_all(self):
        for target, args in self.tasks:
            target(*args)


def test_callback_runs_after_delay():
    sio = FakeSocketIO()
    fired = []
    handle = BackgroundScheduler(sio, tick=1.0).call_later('ABC123', 'round', 60, fired.append)
    assert handle.active
    sio.run_all()
    assert sum(sio.slept) == 60
    assert max(sio.slept) == 1.0
    assert fired == [handle]


def test_last_slice_is_shortened():
    sio = FakeSocketIO()
    BackgroundScheduler(sio, tick=2.0).call_later('ABC123', 'rotation', 3, lambda h: None)
    sio.run_all()
    assert sio.slept == [2.0, 1.0]


def test_cancelled_callback_never_runs():
    sio = FakeSocketIO()
    fired = []
    handle = BackgroundScheduler(sio).call_later('ABC123', 'rotation', 3, fired.append)
    handle.cancel()
    assert not handle.active
    sio.run_all()
    assert fired == []


def test_cancelled_worker_stops_sleeping():
    sio = FakeSocketIO()
    fired = []
    handle = BackgroundScheduler(sio, tick=1.0).call_later('ABC123', 'round', 60, fired.append)

    def cancel_after_two(count):
        if count == 2:
            handle.cancel()

    sio.on_sleep = cancel_after_two
    sio.run_all()
    assert sio.slept == [1.0, 1.0]
    assert fired == []

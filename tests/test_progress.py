import io

from progress import ProgressChannel, TqdmProgress, notify


def test_notify_ignores_missing_and_failing_sinks():
    notify(None, 10)

    def broken(_):
        raise OSError("closed")

    notify(broken, 10)

    seen = []
    notify(seen.append, 20)
    assert seen == [20]


def test_channel_coalesces_repeats():
    channel = ProgressChannel()
    for value in [0, 0, 1, 1, 1, 2, 100]:
        channel(value)
    assert channel.drain() == [0, 1, 2, 100]
    assert channel.drain() == []


def test_full_channel_keeps_latest_values():
    channel = ProgressChannel(maxsize=3)
    for value in range(101):
        channel(value)
    assert channel.drain() == [98, 99, 100]


def test_tqdm_progress_tracks_percentage():
    with TqdmProgress(file=io.StringIO()) as bar:
        for value in [0, 10, 10, 55, 100]:
            bar(value)
        assert bar.bar.n == 100

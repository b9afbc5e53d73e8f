"""队列状态机测试。"""

import pytest

from py_webp_queue.engine.queue import ConversionQueue
from py_webp_queue.exceptions import QueueStateError
from py_webp_queue.models import Preset, QueueStatus
from tests.conftest import fake_output


@pytest.fixture
def queue() -> ConversionQueue:
    return ConversionQueue()


class TestEnqueue:
    """入队测试"""

    def test_items_start_pending(self, queue: ConversionQueue, preset: Preset):
        items = queue.enqueue([(b"a", "one.png"), (b"bb", None)], preset)

        assert len(queue) == 2
        assert [item.status for item in items] == [QueueStatus.PENDING] * 2
        assert items[0].source_name == "one.png"
        assert items[1].source_name == "image"
        assert items[1].origin_path is None
        assert items[0].id != items[1].id

    def test_appends_to_tail(self, queue: ConversionQueue, preset: Preset):
        first = queue.enqueue([(b"a", "a.png")], preset)
        second = queue.enqueue([(b"b", "b.png")], preset)
        assert [item.id for item in queue.snapshot()] == [first[0].id, second[0].id]

    def test_preset_snapshot_is_by_value(self, queue: ConversionQueue, preset: Preset):
        """入队后编辑预设不影响已入队条目"""
        queue.enqueue([(b"a", "a.png")], preset)
        edited = preset.with_changes(quality=10, max_width=100)

        item = queue.snapshot()[0]
        assert item.preset.quality == 80
        assert item.preset.max_width == 800
        assert edited.quality == 10

    def test_empty_enqueue(self, queue: ConversionQueue, preset: Preset):
        notified = []
        queue.subscribe(notified.append)
        assert queue.enqueue([], preset) == []
        assert notified == []


class TestTransitions:
    """状态迁移测试"""

    def test_full_lifecycle(self, queue: ConversionQueue, preset: Preset):
        item = queue.enqueue([(b"data", "a.png")], preset)[0]

        assert queue.set_status(item.id, QueueStatus.CONVERTING)
        assert queue.get(item.id).status == QueueStatus.CONVERTING

        output = fake_output(item.source, item.preset)
        assert queue.set_status(item.id, QueueStatus.DONE, result=output)
        done = queue.get(item.id)
        assert done.status == QueueStatus.DONE
        assert done.result == output
        assert done.is_finished

    def test_error_records_message(self, queue: ConversionQueue, preset: Preset):
        item = queue.enqueue([(b"data", "a.png")], preset)[0]
        queue.set_status(item.id, QueueStatus.CONVERTING)
        queue.set_status(item.id, QueueStatus.ERROR, error="broken")

        failed = queue.get(item.id)
        assert failed.status == QueueStatus.ERROR
        assert failed.error == "broken"
        assert failed.get_status_label() == "broken"

    @pytest.mark.parametrize(
        ("path", "target"),
        [
            ([], QueueStatus.DONE),
            ([], QueueStatus.ERROR),
            ([QueueStatus.CONVERTING], QueueStatus.PENDING),
            ([QueueStatus.CONVERTING, QueueStatus.ERROR], QueueStatus.PENDING),
            ([QueueStatus.CONVERTING, QueueStatus.ERROR], QueueStatus.CONVERTING),
        ],
    )
    def test_illegal_transitions(self, queue, preset, path, target):
        """没有重试迁移，终态只能通过移除离开"""
        item = queue.enqueue([(b"data", "a.png")], preset)[0]
        for status in path:
            queue.set_status(item.id, status)

        with pytest.raises(QueueStateError):
            queue.set_status(item.id, target)

    def test_unknown_item_is_discarded(self, queue: ConversionQueue):
        assert not queue.set_status("missing", QueueStatus.CONVERTING)

    def test_next_pending_follows_list_order(self, queue, preset):
        items = queue.enqueue([(b"1", None), (b"2", None), (b"3", None)], preset)
        queue.set_status(items[0].id, QueueStatus.CONVERTING)
        assert queue.next_pending().id == items[1].id

        queue.remove(items[1].id)
        assert queue.next_pending().id == items[2].id


class TestRemoval:
    """移除和清空测试"""

    def test_remove(self, queue: ConversionQueue, preset: Preset):
        item = queue.enqueue([(b"a", None), (b"b", None)], preset)[0]
        assert queue.remove(item.id)
        assert item.id not in queue
        assert len(queue) == 1
        assert not queue.remove(item.id)

    def test_clear(self, queue: ConversionQueue, preset: Preset):
        queue.enqueue([(b"a", None), (b"b", None)], preset)
        assert queue.clear() == 2
        assert queue.snapshot() == ()
        assert queue.clear() == 0


class TestObservers:
    """观察者测试"""

    def test_notified_after_each_mutation(self, queue, preset):
        snapshots = []
        unsubscribe = queue.subscribe(snapshots.append)

        item = queue.enqueue([(b"a", None)], preset)[0]
        queue.set_status(item.id, QueueStatus.CONVERTING)
        queue.remove(item.id)

        assert [len(s) for s in snapshots] == [1, 1, 0]
        assert snapshots[1][0].status == QueueStatus.CONVERTING
        # 观察者收到的快照与队列当前状态一致
        assert snapshots[-1] == queue.snapshot()

        unsubscribe()
        queue.enqueue([(b"b", None)], preset)
        assert len(snapshots) == 3

    def test_notify_without_mutation(self, queue, preset):
        queue.enqueue([(b"a", None)], preset)
        snapshots = []
        queue.subscribe(snapshots.append)

        queue.notify()
        assert snapshots == [queue.snapshot()]

    def test_failing_observer_does_not_break_mutation(self, queue, preset):
        def broken(_snapshot):
            raise RuntimeError("observer crashed")

        received = []
        queue.subscribe(broken)
        queue.subscribe(received.append)

        queue.enqueue([(b"a", None)], preset)
        assert len(queue) == 1
        assert len(received) == 1

    def test_summary_counts(self, queue, preset):
        items = queue.enqueue([(b"a" * 100, None), (b"b" * 50, None), (b"c", None)], preset)
        queue.set_status(items[0].id, QueueStatus.CONVERTING)
        queue.set_status(
            items[0].id, QueueStatus.DONE, result=fake_output(items[0].source, preset)
        )
        queue.set_status(items[1].id, QueueStatus.CONVERTING)
        queue.set_status(items[1].id, QueueStatus.ERROR, error="bad")

        summary = queue.summary()
        assert (summary.total, summary.done, summary.error, summary.pending) == (
            3,
            1,
            1,
            1,
        )
        assert summary.downloadable == 1
        assert summary.total_saved == 50
        assert "1/3 CONVERTED" in summary.get_summary()

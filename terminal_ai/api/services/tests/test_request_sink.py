from terminal_ai.api.services.request_sink import InMemoryRequestSink, record_safely


def test_recent_is_newest_first_and_bounded():
    # === Configuration ===
    sink = InMemoryRequestSink(max_size=3)

    # === Act ===
    for i in range(5):
        sink.record("unknown_command", f"q{i}", f"r{i}")

    # === Assert ===
    assert [r.query for r in sink.recent(10)] == ["q4", "q3", "q2"]
    assert [r.query for r in sink.recent(1)] == ["q4"]
    assert sink.recent(0) == []


def test_stats_count_every_record_by_kind():
    sink = InMemoryRequestSink(max_size=2)

    sink.record("legal_request", "a", "1")
    sink.record("legal_request", "b", "2")
    sink.record("tcc_request", "c", "3")

    stats = sink.stats()
    assert stats["total"] == 3
    assert stats["retained"] == 2
    assert stats["by_kind"] == {"legal_request": 2, "tcc_request": 1}


def test_record_to_dict():
    sink = InMemoryRequestSink()
    sink.record("case_search", "спадщина", "result")

    item = sink.recent(1)[0].to_dict()

    assert item["kind"] == "case_search"
    assert item["query"] == "спадщина"
    assert item["response"] == "result"
    assert item["created_at"] > 0


def test_record_safely_swallows_sink_errors():
    class Broken:
        def record(self, kind, query, response):
            raise OSError("disk full")

    record_safely(Broken(), "unknown_command", "q", "r")


def test_clear():
    sink = InMemoryRequestSink()
    sink.record("unknown_command", "q", "r")

    sink.clear()

    assert sink.recent() == []
    assert sink.stats()["total"] == 0
